from ..models.schemas import TripPlan


def add_checklist_item(plan: TripPlan, item: str) -> TripPlan:
    item = (item or "").strip()
    if not item:
        return plan
    return plan.model_copy(update={"checklist": plan.checklist + [item]})


def remove_checklist_item(plan: TripPlan, item: str) -> TripPlan:
    return plan.model_copy(update={"checklist": [i for i in plan.checklist if i != item]})
