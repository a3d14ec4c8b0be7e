from collections import defaultdict, deque
from typing import Any, Deque, Dict, List, Optional, Tuple
from urllib.parse import urlencode

from ..models.schemas import Segment, TripPlan, dump_plan, validate_plan

MAPS_SEARCH = "https://www.google.com/maps/search/"

PLACE_FIELDS = ("placeId", "lat", "lon")


def maps_url(segment: Segment) -> Optional[str]:
    if not segment.place_id:
        return None
    params = {"api": 1}
    if segment.lat is not None and segment.lon is not None:
        params["query"] = f"{segment.lat},{segment.lon}"
    params["query_place_id"] = segment.place_id
    return f"{MAPS_SEARCH}?{urlencode(params)}"


def _key(date: str, seg: Dict[str, Any]) -> Tuple[str, str, str]:
    return date, seg.get("type", ""), " ".join(str(seg.get("name", "")).lower().split())


def preserve_place_ids(before: TripPlan, after: TripPlan) -> Tuple[TripPlan, List[str]]:
    """Re-assert place identifiers on segments whose date, type and name did not change.

    A segment that kept its core content did not move, so the previous
    placeId/lat/lon win over whatever came back. Transport endpoints keep
    their ids while the endpoint name is unchanged. Segments that changed
    name, type or date are taken as returned.
    """
    prior: Dict[Tuple[str, str, str], Deque[Dict[str, Any]]] = defaultdict(deque)
    for day in dump_plan(before)["days"]:
        for seg in day["segments"]:
            prior[_key(day["date"], seg)].append(seg)

    data = dump_plan(after)
    notes: List[str] = []
    for day in data["days"]:
        for seg in day["segments"]:
            queue = prior.get(_key(day["date"], seg))
            if not queue:
                continue
            old = queue.popleft()
            changed = [f for f in PLACE_FIELDS if f in old and seg.get(f) != old[f]]
            for f in changed:
                seg[f] = old[f]
            for end, pid in (("from", "fromPlaceId"), ("to", "toPlaceId")):
                if pid in old and seg.get(end) == old.get(end) and seg.get(pid) != old[pid]:
                    seg[pid] = old[pid]
                    changed.append(pid)
            if changed:
                notes.append(f"{day['date']} {seg['name']}: restored {', '.join(changed)}")

    if not notes:
        return after, notes
    return validate_plan(data), notes
