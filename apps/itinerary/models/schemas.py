import datetime as dt
import json
from typing import Any, Dict, List, Literal, Optional, Union, get_args

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from ..errors import ValidationError

TransportMode = Literal["flight", "train", "bus", "cab", "metro", "bike"]
Theme = Literal["heritage", "food", "adventure", "nightlife", "shopping"]
Pace = Literal["relaxed", "balanced", "packed"]
SegmentType = Literal["transport", "activity", "meal", "free"]
RiskTag = Literal["rain", "heat", "crowd", "late-night", "closure"]
Currency = Literal["INR"]

TRANSPORT_MODES = get_args(TransportMode)
THEMES = get_args(Theme)
PACES = get_args(Pace)
SEGMENT_TYPES = get_args(SegmentType)
RISK_TAGS = get_args(RiskTag)

# rounding slack allowed between totals.perPerson and est / travelers
PER_PERSON_TOLERANCE = 1.0


def day_span(start: dt.date, end: dt.date) -> int:
    """Inclusive number of calendar days between two dates."""
    return (end - start).days + 1


class _Model(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ---------- request ----------

class Party(_Model):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    adults: int = Field(ge=0)
    kids: int = Field(ge=0)
    seniors: int = Field(ge=0)

    @property
    def total(self) -> int:
        return self.adults + self.kids + self.seniors


class TripRequest(_Model):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    nl: Optional[str] = None  # free-text note, may name several cities
    start_point: str = Field(alias="startPoint", min_length=1)
    destination: str = Field(min_length=1)
    start: dt.date
    end: dt.date
    budget_inr: float = Field(alias="budgetINR", ge=0)
    party: Party
    modes: List[TransportMode] = Field(default_factory=list)
    themes: List[Theme] = Field(default_factory=list)
    pace: Pace
    anchors: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_range_and_party(self):
        if self.end < self.start:
            raise ValueError("end date must not be before start date")
        if self.party.total < 1:
            raise ValueError("party must include at least one traveler")
        return self

    @property
    def travelers(self) -> int:
        return self.party.total

    @property
    def days(self) -> int:
        return day_span(self.start, self.end)


class TripDetails(_Model):
    """Partial request pulled out of free text. Absent means "not inferred"."""

    city: Optional[str] = None
    start: Optional[dt.date] = None
    end: Optional[dt.date] = None
    budget_inr: Optional[float] = Field(None, alias="budgetINR", ge=0)
    party: Optional[Party] = None
    modes: Optional[List[TransportMode]] = None
    themes: Optional[List[Theme]] = None
    pace: Optional[Pace] = None
    anchors: Optional[List[str]] = None

    @field_validator("modes", mode="before")
    @classmethod
    def _known_modes(cls, v):
        if isinstance(v, list):
            return [m for m in v if m in TRANSPORT_MODES]
        return v

    @field_validator("themes", mode="before")
    @classmethod
    def _known_themes(cls, v):
        if isinstance(v, list):
            return [t for t in v if t in THEMES]
        return v


# ---------- plan ----------

class Trip(_Model):
    title: str = Field(min_length=1)
    cities: List[str]
    start: dt.date
    end: dt.date
    budget: float = Field(ge=0)
    currency: Currency


class Traveler(_Model):
    age: float
    gender: Optional[str] = None
    vibe: Optional[str] = None


class Segment(_Model):
    type: SegmentType
    name: str
    description: Optional[str] = None
    place_id: Optional[str] = Field(None, alias="placeId")
    lat: Optional[float] = None
    lon: Optional[float] = None
    # transport legs
    mode: Optional[str] = None
    from_: Optional[str] = Field(None, alias="from")
    to: Optional[str] = None
    from_place_id: Optional[str] = Field(None, alias="fromPlaceId")
    to_place_id: Optional[str] = Field(None, alias="toPlaceId")
    dep: Optional[str] = None
    arr: Optional[str] = None
    # everything else
    window: Optional[List[str]] = Field(None, min_length=2, max_length=2)
    open_hours: Optional[str] = Field(None, alias="openHours")
    rating: Optional[float] = None
    est_cost: Optional[float] = Field(None, alias="estCost")
    risk: Optional[List[RiskTag]] = None

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("segment name must not be blank")
        return v


class Day(_Model):
    date: dt.date
    city: str
    day_budget: Optional[float] = Field(None, alias="dayBudget")
    day_spend_est: Optional[float] = Field(None, alias="daySpendEst")
    segments: List[Segment] = Field(min_length=1)


class Totals(_Model):
    est: float = Field(ge=0)
    per_person: Optional[float] = Field(None, alias="perPerson", ge=0)


class Risk(_Model):
    kind: str
    date: dt.date
    severity: str
    note: str


class TripPlan(_Model):
    trip: Trip
    party: Optional[List[Traveler]] = None
    days: List[Day]
    totals: Totals
    risks: Optional[List[Risk]] = None
    packing_list: List[str] = Field(alias="packingList")
    checklist: List[str]

    @model_validator(mode="after")
    def _check_days_and_totals(self):
        trip = self.trip
        if trip.end < trip.start:
            raise ValueError("trip.end must not be before trip.start")
        expected = day_span(trip.start, trip.end)
        if len(self.days) != expected:
            raise ValueError(f"expected {expected} day entries for {trip.start}..{trip.end}, got {len(self.days)}")
        for i, day in enumerate(self.days):
            want = trip.start + dt.timedelta(days=i)
            if day.date != want:
                raise ValueError(f"days[{i}] is dated {day.date}, expected {want}")
        if self.totals.per_person is not None and self.party is not None:
            share = self.totals.est / max(1, len(self.party))
            if abs(self.totals.per_person - share) > PER_PERSON_TOLERANCE:
                raise ValueError(f"totals.perPerson {self.totals.per_person} does not match est / travelers ({share:.2f})")
        return self

    def iter_segments(self):
        for day in self.days:
            for seg in day.segments:
                yield day, seg


class AdjustmentRequest(_Model):
    # serialized plan or the plan object itself
    current_itinerary: Union[str, Dict[str, Any]] = Field(alias="currentItinerary")
    modification_prompt: str = Field(alias="modificationPrompt")

    @field_validator("modification_prompt")
    @classmethod
    def _prompt_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("modification prompt must not be empty")
        return v


# ---------- boundary helpers ----------

def _load(raw: Any) -> Any:
    if isinstance(raw, (str, bytes)):
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValidationError(f"not valid JSON: {e}") from e
    if isinstance(raw, BaseModel):
        return raw.model_dump(by_alias=True)
    return raw


def validate_request(raw: Any) -> TripRequest:
    try:
        return TripRequest.model_validate(_load(raw))
    except PydanticValidationError as e:
        raise ValidationError("invalid trip request", e.errors(include_url=False)) from e


def validate_plan(raw: Any) -> TripPlan:
    """Structural check of a plan. Plausibility (do costs add up?) is not checked."""
    try:
        return TripPlan.model_validate(_load(raw))
    except PydanticValidationError as e:
        raise ValidationError("invalid trip plan", e.errors(include_url=False)) from e


def validate_details(raw: Any) -> TripDetails:
    raw = _load(raw)
    if isinstance(raw, dict):
        # absent stays absent; never turn a null into an empty value
        raw = {k: v for k, v in raw.items() if v is not None}
    try:
        return TripDetails.model_validate(raw)
    except PydanticValidationError as e:
        raise ValidationError("invalid trip details", e.errors(include_url=False)) from e


def dump_plan(plan: TripPlan) -> Dict[str, Any]:
    return plan.model_dump(mode="json", by_alias=True, exclude_none=True)


def plan_to_json(plan: TripPlan, indent: Optional[int] = 2) -> str:
    return json.dumps(dump_plan(plan), ensure_ascii=False, indent=indent)


def validate_adjustment(raw: Any) -> AdjustmentRequest:
    try:
        return AdjustmentRequest.model_validate(_load(raw))
    except PydanticValidationError as e:
        raise ValidationError("invalid adjustment request", e.errors(include_url=False)) from e
