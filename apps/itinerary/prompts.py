import datetime as dt
import json
from typing import Any, Dict

from .models.schemas import RISK_TAGS, TripRequest

EXTRACT_INSTRUCTION = """You are an expert trip planner. Extract the following details from the user's request: \
city, start date, end date, budget in INR, party composition (adults, kids, seniors), preferred modes of transport \
(subset of flight, train, bus, cab, metro, bike), travel themes (subset of heritage, food, adventure, nightlife, shopping), \
desired pace (relaxed, balanced or packed), and any must-visit places (anchors).

Today's date is {today}. If dates are relative (e.g., "next weekend", "in 4 days"), calculate the absolute dates \
as YYYY-MM-DD. If a duration is given (e.g., "4 days"), calculate the end date from the start date.
Leave out every field you cannot infer with confidence. Never fill a field with an empty or zero value as a guess.
Return a single JSON object and nothing else."""

GENERATE_INSTRUCTION = """You are an Indian trip-planning assistant. Your output MUST be a single JSON object that \
strictly adheres to the response schema. Do not include any extra text, commentary, or markdown formatting.

The user's request may involve multiple cities or destinations. Create a logical itinerary that may span across \
different locations day-by-day, with exactly one entry in "days" per calendar date from the start date to the end \
date inclusive, in order.
You must respect all constraints from the user's request: dates, INR budget, party composition (ages), transport \
modes, travel themes, pace, and must-visit anchors.

For each day, specify the city for that day's plan and at least one segment.
Every segment needs a descriptive "name"; for transport use names like "Train from [City A] to [City B]".
Build a feasible day-by-day plan. Ensure durations, opening hours, ratings (if known), and travel legs between \
cities are realistic.
Assign risk tags for each segment where applicable, choosing only from: {risk_tags}.
Set trip.budget to the requested budget and trip.currency to "INR".
Include a non-empty practical "packingList" and a non-empty pre-travel "checklist"."""

ADJUST_INSTRUCTION = """You are an AI travel assistant. Your task is to modify an existing trip itinerary based on \
user feedback. The user's request for changes is given in natural language.
You MUST return a complete, valid JSON object that strictly adheres to the response schema, incorporating the \
requested changes. Return the full updated itinerary, not a list of changes. Do not include any extra text, \
commentary, or markdown formatting.

Keep every field that the requested change does not touch exactly as it is. In particular keep placeId, \
fromPlaceId, toPlaceId, lat and lon of every segment unless the change explicitly moves that activity to a \
different place. Keep the trip dates, budget and currency unless the user asks to change them.
Risk tags may only be chosen from: {risk_tags}."""


def extraction_instruction(today: dt.date) -> str:
    return EXTRACT_INSTRUCTION.format(today=today.isoformat())


def generation_instruction() -> str:
    return GENERATE_INSTRUCTION.format(risk_tags=", ".join(f"'{t}'" for t in RISK_TAGS))


def adjustment_instruction() -> str:
    return ADJUST_INSTRUCTION.format(risk_tags=", ".join(f"'{t}'" for t in RISK_TAGS))


def render_request(req: TripRequest) -> str:
    p = req.party
    return (
        "User Request:\n"
        f"Start Point: {req.start_point}\n"
        f"Destination: {req.destination}\n"
        f"Natural Language Prompt: {req.nl or ''}\n"
        f"Dates: {req.start.isoformat()} to {req.end.isoformat()} ({req.days} days)\n"
        f"Budget: {req.budget_inr:g} INR\n"
        f"Party: Adults: {p.adults}, Kids: {p.kids}, Seniors: {p.seniors}\n"
        f"Transport Modes: {', '.join(req.modes)}\n"
        f"Themes: {', '.join(req.themes)}\n"
        f"Pace: {req.pace}\n"
        f"Must-visit Anchors: {', '.join(req.anchors)}"
    )


def render_adjustment(plan: Dict[str, Any], modification: str) -> str:
    return (
        "Here is the current itinerary that needs to be modified:\n"
        f"{json.dumps(plan, ensure_ascii=False)}\n\n"
        "Here is the user's request for changes:\n"
        f'"{modification.strip()}"\n\n'
        "Please apply the changes to the itinerary and return the full, updated itinerary object."
    )
