from collections import Counter
from typing import Dict, Iterable, List, Union

from ..models.schemas import Risk, TripPlan

# shown on the weather panel; crowd/closure live on the segments themselves
WEATHER_RISK_KINDS = frozenset({"rain", "heat"})


def budget_utilization(plan: TripPlan) -> float:
    """totals.est / trip.budget. Above 1.0 means over budget; clamping is the caller's job."""
    budget = plan.trip.budget
    if budget == 0:
        return float("inf") if plan.totals.est > 0 else 0.0
    return plan.totals.est / budget


def active_risks(plan: TripPlan, kinds: Union[str, Iterable[str]] = WEATHER_RISK_KINDS) -> List[Risk]:
    if isinstance(kinds, str):
        kinds = [kinds]
    wanted = {k.lower() for k in kinds}
    return [r for r in plan.risks or [] if r.kind.lower() in wanted]


def segment_risk_counts(plan: TripPlan) -> Dict[str, int]:
    counts = Counter()
    for _day, seg in plan.iter_segments():
        counts.update(seg.risk or [])
    return dict(counts)
