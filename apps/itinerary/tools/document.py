"""Row data for the printable itinerary.

The renderer (PDF, HTML, whatever) lays these out; nothing here draws.
Layout: a header, a small summary table, one section per day with
(time, activity, cost) rows, then the packing list and checklist.
"""
from datetime import date
from typing import List, Tuple

from pydantic import BaseModel

from ..models.schemas import Segment, TripPlan

Row = Tuple[str, str, str]


TABLE_HEAD: Row = ("Time", "Activity / Leg", "Est. Cost")


class DaySection(BaseModel):
    heading: str
    subheading: str
    head: Row = TABLE_HEAD
    rows: List[Row]


class DocumentOutline(BaseModel):
    title: str
    subtitle: str
    summary: List[Tuple[str, str]]
    days: List[DaySection]
    preparation: List[Tuple[str, str]]


def _ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        return f"{n}th"
    suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def long_date(d: date) -> str:
    return f"{_ordinal(d.day)} {d:%B %Y}"


def weekday_date(d: date) -> str:
    return f"{d:%A, %B} {_ordinal(d.day)}"


def money(amount: float, currency: str = "INR") -> str:
    text = f"{amount:,.0f}" if float(amount).is_integer() else f"{amount:,.2f}"
    return f"{currency} {text}"


def segment_time(seg: Segment) -> str:
    if seg.type == "transport" and (seg.dep or seg.arr):
        return f"{seg.dep or '?'} - {seg.arr or '?'}"
    if seg.window:
        return " - ".join(seg.window)
    return "All Day"


def segment_label(seg: Segment) -> str:
    label = f"{seg.type.capitalize()}: {seg.name}"
    details = [
        seg.description,
        f"Rating: ★ {seg.rating:g}" if seg.rating else None,
        f"Risks: {', '.join(seg.risk)}" if seg.risk else None,
    ]
    details = [d for d in details if d]
    return "\n".join([label] + details)


def segment_row(seg: Segment, currency: str = "INR") -> Row:
    cost = money(seg.est_cost, currency) if seg.est_cost else "Free"
    return segment_time(seg), segment_label(seg), cost


def document_sections(plan: TripPlan) -> DocumentOutline:
    trip = plan.trip
    days = [
        DaySection(
            heading=f"Day {i}: {day.city}",
            subheading=weekday_date(day.date),
            rows=[segment_row(seg, trip.currency) for seg in day.segments],
        )
        for i, day in enumerate(plan.days, start=1)
    ]
    preparation = []
    if plan.packing_list or plan.checklist:
        preparation = [
            ("Packing List", "\n".join(f"- {item}" for item in plan.packing_list)),
            ("Checklist", "\n".join(f"- {item}" for item in plan.checklist)),
        ]
    return DocumentOutline(
        title=trip.title,
        subtitle=f"{', '.join(trip.cities)} | {long_date(trip.start)} - {long_date(trip.end)}",
        summary=[
            ("Total Budget", money(trip.budget, trip.currency)),
            ("Estimated Cost", money(plan.totals.est, trip.currency)),
            ("Travelers", str(len(plan.party or []) or 1)),
        ],
        days=days,
        preparation=preparation,
    )
