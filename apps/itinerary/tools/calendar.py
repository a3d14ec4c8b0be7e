import os
import re
from datetime import datetime, time, timedelta
from typing import List, NamedTuple, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ics import Calendar, Event

from ..config import settings
from ..errors import ValidationError
from ..models.schemas import Day, Segment, TripPlan

DEFAULT_START = time(9, 0)
DEFAULT_LENGTH = timedelta(hours=1)

_TIME_FORMATS = ("%H:%M", "%H:%M:%S", "%I:%M %p", "%I:%M%p", "%I %p", "%I%p", "%H%M")


class CalendarEvent(NamedTuple):
    start: datetime
    end: datetime
    summary: str
    location: Optional[str]


def parse_time(value: Optional[str]) -> Optional[time]:
    if not value:
        return None
    text = value.strip().upper()
    for fmt in _TIME_FORMATS:
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    return None


def _bounds(seg: Segment) -> tuple:
    if seg.type == "transport":
        return parse_time(seg.dep), parse_time(seg.arr)
    if seg.window:
        return parse_time(seg.window[0]), parse_time(seg.window[1])
    return None, None


def _event(day: Day, seg: Segment) -> CalendarEvent:
    t0, t1 = _bounds(seg)
    if t0 is None and t1 is None:
        t0 = DEFAULT_START
    if t0 is not None:
        start = datetime.combine(day.date, t0)
        end = datetime.combine(day.date, t1) if t1 is not None else start + DEFAULT_LENGTH
    else:
        end = datetime.combine(day.date, t1)
        start = end - DEFAULT_LENGTH
    if end < start:
        # overnight leg
        end += timedelta(days=1)
    if seg.type == "transport" and seg.from_ and seg.to:
        summary = f"{seg.mode or 'travel'} from {seg.from_} to {seg.to}"
    else:
        summary = seg.name
    return CalendarEvent(start, end, summary, seg.to or None)


def calendar_events(plan: TripPlan) -> List[CalendarEvent]:
    """One event per segment, in plan order. Times are the plan's wall-clock times."""
    return [_event(day, seg) for day, seg in plan.iter_segments()]


def slugify(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-") or "trip"


def export_filename(plan: TripPlan, ext: str) -> str:
    return f"trip-{slugify(plan.trip.title)}-{plan.trip.start.isoformat()}.{ext}"


def _zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        msg = f"unknown time zone {name!r}"
        raise ValidationError(msg, [{"loc": ("tz",), "msg": msg}]) from e


def make_ics(plan: TripPlan, tz: Optional[str] = None) -> str:
    zone = _zone(tz or settings.TIMEZONE)
    stamp = datetime.combine(plan.trip.start, time(0, 0), tzinfo=zone)
    slug = slugify(plan.trip.title)
    cal = Calendar()
    for i, ev in enumerate(calendar_events(plan)):
        e = Event()
        e.name = ev.summary
        e.begin = ev.start.replace(tzinfo=zone)
        e.end = ev.end.replace(tzinfo=zone)
        if ev.location:
            e.location = ev.location
        # stable uid/stamp so the same plan always exports the same calendar
        e.uid = f"{slug}-{i}@itinerary-planner"
        e.created = stamp
        cal.events.add(e)
    return cal.serialize()


def write_ics(plan: TripPlan, out_dir: Optional[str] = None) -> str:
    out_dir = out_dir or settings.EXPORT_DIR
    os.makedirs(out_dir, exist_ok=True)
    path = os.path.join(out_dir, export_filename(plan, "ics"))
    with open(path, "w", encoding="utf-8") as f:
        f.write(make_ics(plan))
    return path
