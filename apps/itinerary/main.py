import logging
import math
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Response
from pydantic import BaseModel

from .config import configure_logging, settings
from .errors import AdjustmentFailed, ExtractionFailed, GenerationFailed, ValidationError
from .extraction import extract_trip_details
from .graph import aadjust, agenerate
from .memory.saved_plans import SavedPlanStore
from .models.schemas import TripPlan, dump_plan, plan_to_json, validate_adjustment, validate_plan
from .oracle import GroqOracle, Oracle
from .tools.budget import WEATHER_RISK_KINDS, active_risks, budget_utilization
from .tools.calendar import export_filename, make_ics
from .tools.document import DocumentOutline, document_sections

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Itinerary Planner API", version="0.1.0")


def get_oracle() -> Oracle:
    return GroqOracle()


def get_store() -> SavedPlanStore:
    return SavedPlanStore()


class ExtractBody(BaseModel):
    nl: str


class PlanSummary(BaseModel):
    title: str
    cities: List[str]
    start: str
    end: str
    # None when the budget is zero but money is spent
    utilization: Optional[float]
    over_budget: bool
    weather_risks: List[Dict[str, Any]]


def _invalid(e: ValidationError) -> HTTPException:
    return HTTPException(status_code=422, detail=e.summary())


def _plan_or_422(raw: Any) -> TripPlan:
    try:
        return validate_plan(raw)
    except ValidationError as e:
        raise _invalid(e)


@app.get("/health")
def health():
    return {"ok": True, "model": settings.MODEL, "oracle_key_set": bool(settings.GROQ_API_KEY)}


@app.post("/extract")
def extract(body: ExtractBody, oracle: Oracle = Depends(get_oracle)):
    try:
        details = extract_trip_details(body.nl, oracle)
    except ValidationError as e:
        raise _invalid(e)
    except ExtractionFailed as e:
        logger.info("extraction failed: %s", e)
        raise HTTPException(
            status_code=422,
            detail="Could not extract details from the prompt. Please fill the form manually.",
        )
    return details.model_dump(mode="json", by_alias=True, exclude_none=True)


@app.post("/plan")
async def plan(req: Dict[str, Any], oracle: Oracle = Depends(get_oracle)):
    try:
        result = await agenerate(req, oracle)
    except ValidationError as e:
        raise _invalid(e)
    except GenerationFailed as e:
        raise HTTPException(status_code=502, detail=f"Could not generate an itinerary, please try again. ({e})")
    return dump_plan(result)


@app.post("/adjust")
async def adjust_plan(body: Dict[str, Any], oracle: Oracle = Depends(get_oracle)):
    try:
        change = validate_adjustment(body)
        result = await aadjust(change.current_itinerary, change.modification_prompt, oracle)
    except ValidationError as e:
        raise _invalid(e)
    except AdjustmentFailed as e:
        raise HTTPException(
            status_code=502,
            detail=f"The itinerary could not be adjusted. Please try a different request. ({e})",
        )
    return dump_plan(result)


def _summary(p: TripPlan) -> PlanSummary:
    used = budget_utilization(p)
    return PlanSummary(
        title=p.trip.title,
        cities=p.trip.cities,
        start=p.trip.start.isoformat(),
        end=p.trip.end.isoformat(),
        utilization=None if math.isinf(used) else used,
        over_budget=used > 1,
        weather_risks=[r.model_dump(mode="json") for r in active_risks(p, WEATHER_RISK_KINDS)],
    )


@app.get("/plans", response_model=List[PlanSummary])
def list_plans(store: SavedPlanStore = Depends(get_store)):
    return [_summary(p) for p in store.list_plans()]


@app.post("/plans")
def save_plan(body: Dict[str, Any], store: SavedPlanStore = Depends(get_store)):
    p = _plan_or_422(body)
    replaced = store.save(p)
    return {"title": p.trip.title, "replaced": replaced}


@app.get("/plans/{title}")
def get_plan(title: str, store: SavedPlanStore = Depends(get_store)):
    p = store.get(title)
    if p is None:
        raise HTTPException(status_code=404, detail=f"No saved plan titled {title!r}")
    return dump_plan(p)


@app.delete("/plans/{title}")
def delete_plan(title: str, store: SavedPlanStore = Depends(get_store)):
    if not store.delete(title):
        raise HTTPException(status_code=404, detail=f"No saved plan titled {title!r}")
    return {"deleted": title}


def _attachment(content: str, filename: str, media_type: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@app.post("/export/json")
def export_json(body: Dict[str, Any]):
    p = _plan_or_422(body)
    return _attachment(plan_to_json(p), export_filename(p, "json"), "application/json")


@app.post("/export/ics")
def export_ics(body: Dict[str, Any], tz: Optional[str] = None):
    p = _plan_or_422(body)
    try:
        text = make_ics(p, tz)
    except ValidationError as e:
        raise _invalid(e)
    return _attachment(text, export_filename(p, "ics"), "text/calendar")


@app.post("/export/document", response_model=DocumentOutline)
def export_document(body: Dict[str, Any]):
    return document_sections(_plan_or_422(body))
