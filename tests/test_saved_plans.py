import json
import os

import pytest

from apps.itinerary.memory.saved_plans import SavedPlanStore
from apps.itinerary.models.schemas import validate_plan


@pytest.fixture
def store(tmp_path):
    return SavedPlanStore(str(tmp_path / "plans" / "saved.json"))


def test_empty_store(store):
    assert store.list_plans() == []
    assert store.get("anything") is None
    assert store.delete("anything") is False


def test_save_get_delete(store, plan_data):
    plan = validate_plan(plan_data)
    assert store.save(plan) is False
    assert store.titles() == ["Coastal Food Trail: Mumbai to Goa"]
    assert store.get("Coastal Food Trail: Mumbai to Goa") == plan
    assert store.delete("Coastal Food Trail: Mumbai to Goa") is True
    assert store.list_plans() == []


def test_same_title_overwrites(store, plan_data):
    store.save(validate_plan(plan_data))
    plan_data["checklist"] = ["Renew passport"]
    assert store.save(validate_plan(plan_data)) is True
    plans = store.list_plans()
    assert len(plans) == 1
    assert plans[0].checklist == ["Renew passport"]


def test_keeps_save_order(store, plan_data):
    store.save(validate_plan(plan_data))
    plan_data["trip"]["title"] = "Second trip"
    store.save(validate_plan(plan_data))
    assert store.titles() == ["Coastal Food Trail: Mumbai to Goa", "Second trip"]


def test_corrupt_file_reads_as_empty(store):
    os.makedirs(os.path.dirname(store.path), exist_ok=True)
    with open(store.path, "w", encoding="utf-8") as f:
        f.write("{not json")
    assert store.list_plans() == []


def test_invalid_entries_are_skipped(store, plan_data):
    broken = json.loads(json.dumps(plan_data))
    broken["trip"]["title"] = "Broken"
    del broken["totals"]
    os.makedirs(os.path.dirname(store.path), exist_ok=True)
    with open(store.path, "w", encoding="utf-8") as f:
        json.dump([broken, plan_data], f)
    assert store.titles() == ["Coastal Food Trail: Mumbai to Goa"]
    assert store.delete("Broken") is True
