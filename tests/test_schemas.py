import json
from datetime import date

import pytest

from apps.itinerary.errors import ValidationError
from apps.itinerary.models.schemas import (
    dump_plan,
    validate_adjustment,
    validate_details,
    validate_plan,
    validate_request,
)


def test_valid_request_is_accepted(request_data):
    req = validate_request(request_data)
    assert req.start_point == "Mumbai"
    assert req.budget_inr == 20000
    assert req.travelers == 2
    assert req.days == 3
    assert req.modes == ["train"]


def test_request_from_json_string(request_data):
    req = validate_request(json.dumps(request_data))
    assert req.end == date(2025, 1, 12)


def test_single_day_request_is_fine(request_data):
    request_data["end"] = request_data["start"]
    assert validate_request(request_data).days == 1


@pytest.mark.parametrize("field, value", [
    ("end", "2025-01-09"),
    ("budgetINR", -1),
    ("party", {"adults": 2, "kids": -1, "seniors": 0}),
    ("party", {"adults": 0, "kids": 0, "seniors": 0}),
    ("modes", ["train", "boat"]),
    ("themes", ["beaches"]),
    ("pace", "slow"),
    ("start", "10/01/2025"),
])
def test_bad_request_is_rejected(request_data, field, value):
    request_data[field] = value
    with pytest.raises(ValidationError) as exc:
        validate_request(request_data)
    assert exc.value.errors


def test_request_missing_destination(request_data):
    del request_data["destination"]
    with pytest.raises(ValidationError) as exc:
        validate_request(request_data)
    assert "destination" in exc.value.summary()


def test_valid_plan_is_accepted(plan_data):
    plan = validate_plan(plan_data)
    assert len(plan.days) == 3
    assert plan.trip.currency == "INR"
    assert plan.days[0].segments[0].from_ == "Mumbai"
    assert plan.days[1].segments[0].risk == ["heat", "crowd"]
    assert plan.packing_list == ["Sunscreen", "Swimwear"]


def test_plan_day_count_must_match_range(plan_data):
    plan_data["days"].pop()
    with pytest.raises(ValidationError) as exc:
        validate_plan(plan_data)
    assert "expected 3 day entries" in exc.value.summary()


def test_plan_days_must_follow_calendar(plan_data):
    plan_data["days"][1]["date"] = "2025-01-12"
    with pytest.raises(ValidationError):
        validate_plan(plan_data)


def test_blank_segment_name_rejected(plan_data):
    plan_data["days"][0]["segments"][1]["name"] = "   "
    with pytest.raises(ValidationError):
        validate_plan(plan_data)


def test_missing_segment_name_rejected(plan_data):
    del plan_data["days"][0]["segments"][0]["name"]
    with pytest.raises(ValidationError):
        validate_plan(plan_data)


def test_unknown_risk_tag_is_an_error_not_dropped(plan_data):
    plan_data["days"][1]["segments"][0]["risk"] = ["heat", "flood"]
    with pytest.raises(ValidationError):
        validate_plan(plan_data)


def test_unknown_segment_type_rejected(plan_data):
    plan_data["days"][1]["segments"][1]["type"] = "hotel"
    with pytest.raises(ValidationError):
        validate_plan(plan_data)


def test_missing_totals_rejected(plan_data):
    del plan_data["totals"]
    with pytest.raises(ValidationError) as exc:
        validate_plan(plan_data)
    assert "totals" in exc.value.summary()


def test_negative_total_rejected(plan_data):
    plan_data["totals"] = {"est": -5}
    with pytest.raises(ValidationError):
        validate_plan(plan_data)


def test_per_person_must_match_party(plan_data):
    plan_data["totals"]["perPerson"] = 18500
    with pytest.raises(ValidationError):
        validate_plan(plan_data)


def test_per_person_allows_rounding(plan_data):
    plan_data["totals"] = {"est": 18501, "perPerson": 9250}
    assert validate_plan(plan_data).totals.per_person == 9250


def test_per_person_unchecked_without_party(plan_data):
    del plan_data["party"]
    plan_data["totals"]["perPerson"] = 4625
    assert validate_plan(plan_data).party is None


def test_window_needs_two_entries(plan_data):
    plan_data["days"][1]["segments"][0]["window"] = ["09:00"]
    with pytest.raises(ValidationError):
        validate_plan(plan_data)


def test_only_inr(plan_data):
    plan_data["trip"]["currency"] = "USD"
    with pytest.raises(ValidationError):
        validate_plan(plan_data)


def test_day_without_segments_rejected(plan_data):
    plan_data["days"][2]["segments"] = []
    with pytest.raises(ValidationError):
        validate_plan(plan_data)


def test_extra_keys_from_oracle_are_ignored(plan_data):
    plan_data["summary"] = "Have fun!"
    plan_data["days"][0]["segments"][0]["seat"] = "S4"
    assert "seat" not in json.dumps(dump_plan(validate_plan(plan_data)))


def test_plan_must_be_an_object():
    with pytest.raises(ValidationError):
        validate_plan(["not", "a", "plan"])
    with pytest.raises(ValidationError):
        validate_plan("{broken json")


def test_dump_uses_wire_names(plan_data):
    dumped = dump_plan(validate_plan(plan_data))
    transport = dumped["days"][0]["segments"][0]
    assert transport["from"] == "Mumbai"
    assert transport["fromPlaceId"] == "ChIJ-csmt"
    assert "packingList" in dumped
    assert dumped["totals"]["perPerson"] == 9250
    assert "description" not in transport
    assert validate_plan(dumped) == validate_plan(plan_data)


def test_details_absent_stays_absent():
    details = validate_details({"city": "Goa", "budgetINR": None, "party": None})
    assert details.city == "Goa"
    assert details.budget_inr is None
    assert "budgetINR" not in details.model_dump(by_alias=True, exclude_none=True)


def test_details_filters_unknown_modes_and_themes():
    details = validate_details({"modes": ["train", "ferry"], "themes": ["food", "beaches"]})
    assert details.modes == ["train"]
    assert details.themes == ["food"]


def test_details_rejects_bad_pace():
    with pytest.raises(ValidationError):
        validate_details({"pace": "leisurely"})


def test_adjustment_needs_text(plan_data):
    with pytest.raises(ValidationError):
        validate_adjustment({"currentItinerary": json.dumps(plan_data), "modificationPrompt": "  "})
    change = validate_adjustment({"currentItinerary": plan_data, "modificationPrompt": "More beaches"})
    assert change.current_itinerary == plan_data
