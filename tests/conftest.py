import copy

import pytest


class FakeOracle:
    """Replays canned replies; a callable reply is called with (instruction, payload)."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls = []

    def complete(self, instruction, payload, schema=None):
        self.calls.append((instruction, payload, schema))
        reply = self.replies.pop(0) if self.replies else None
        if callable(reply):
            return reply(instruction, payload)
        return copy.deepcopy(reply)


def make_request():
    return {
        "startPoint": "Mumbai",
        "destination": "Goa",
        "start": "2025-01-10",
        "end": "2025-01-12",
        "budgetINR": 20000,
        "party": {"adults": 2, "kids": 0, "seniors": 0},
        "modes": ["train"],
        "themes": ["food"],
        "pace": "relaxed",
        "anchors": ["Baga Beach"],
    }


def make_plan():
    return {
        "trip": {
            "title": "Coastal Food Trail: Mumbai to Goa",
            "cities": ["Mumbai", "Goa"],
            "start": "2025-01-10",
            "end": "2025-01-12",
            "budget": 20000,
            "currency": "INR",
        },
        "party": [{"age": 30}, {"age": 28, "vibe": "foodie"}],
        "days": [
            {
                "date": "2025-01-10",
                "city": "Goa",
                "dayBudget": 7000,
                "segments": [
                    {
                        "type": "transport",
                        "name": "Train from Mumbai to Goa",
                        "mode": "train",
                        "from": "Mumbai",
                        "to": "Madgaon",
                        "fromPlaceId": "ChIJ-csmt",
                        "toPlaceId": "ChIJ-madgaon",
                        "dep": "06:00",
                        "arr": "17:30",
                        "estCost": 3000,
                    },
                    {
                        "type": "meal",
                        "name": "Dinner at Fisherman's Wharf",
                        "placeId": "ChIJ-wharf",
                        "lat": 15.28,
                        "lon": 73.96,
                        "window": ["19:30", "21:00"],
                        "estCost": 2500,
                        "risk": ["crowd"],
                    },
                ],
            },
            {
                "date": "2025-01-11",
                "city": "Goa",
                "segments": [
                    {
                        "type": "activity",
                        "name": "Baga Beach",
                        "description": "Sun, shacks and water sports.",
                        "placeId": "X",
                        "lat": 1.0,
                        "lon": 2.0,
                        "window": ["09:00", "12:00"],
                        "rating": 4.4,
                        "risk": ["heat", "crowd"],
                    },
                    {
                        "type": "meal",
                        "name": "Lunch at Britto's",
                        "placeId": "ChIJ-brittos",
                        "window": ["13:00", "14:30"],
                        "estCost": 1800,
                    },
                ],
            },
            {
                "date": "2025-01-12",
                "city": "Goa",
                "segments": [
                    {
                        "type": "activity",
                        "name": "Fort Aguada",
                        "placeId": "ChIJ-aguada",
                        "lat": 15.49,
                        "lon": 73.77,
                        "window": ["10:00", "12:00"],
                        "openHours": "09:30-18:00",
                        "estCost": 100,
                    },
                    {
                        "type": "transport",
                        "name": "Train from Goa to Mumbai",
                        "mode": "train",
                        "from": "Madgaon",
                        "to": "Mumbai",
                        "dep": "18:00",
                        "arr": "07:00",
                        "estCost": 3000,
                    },
                ],
            },
        ],
        "totals": {"est": 18500, "perPerson": 9250},
        "risks": [
            {"kind": "heat", "date": "2025-01-11", "severity": "moderate", "note": "Midday sun on the beach"},
            {"kind": "crowd", "date": "2025-01-11", "severity": "high", "note": "Weekend crowds at Baga"},
        ],
        "packingList": ["Sunscreen", "Swimwear"],
        "checklist": ["Book train tickets", "Carry ID"],
    }


@pytest.fixture
def request_data():
    return make_request()


@pytest.fixture
def plan_data():
    return make_plan()


@pytest.fixture
def fake_oracle():
    return FakeOracle
