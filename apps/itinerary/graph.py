import logging
from typing import Any, Dict, List, Literal, Optional

from langchain_core.runnables import RunnableConfig
from langgraph.graph import END, START, StateGraph
from pydantic import BaseModel

from .errors import AdjustmentFailed, GenerationFailed, ValidationError
from .models.schemas import (
    PER_PERSON_TOLERANCE,
    TripPlan,
    TripRequest,
    dump_plan,
    validate_plan,
    validate_request,
)
from .oracle import GroqOracle, Oracle
from .prompts import adjustment_instruction, generation_instruction, render_adjustment, render_request
from .tools.places import preserve_place_ids

logger = logging.getLogger(__name__)


class PlannerState(BaseModel):
    mode: Literal["generate", "adjust"]
    request: Optional[TripRequest] = None
    current_plan: Optional[TripPlan] = None
    modification: Optional[str] = None
    raw_output: Optional[Dict[str, Any]] = None
    plan: Optional[TripPlan] = None
    error: Optional[str] = None
    notes: List[str] = []


def _oracle(config: Optional[RunnableConfig]) -> Oracle:
    oracle = ((config or {}).get("configurable") or {}).get("oracle")
    return oracle or GroqOracle()


# Nodes
def draft_itinerary(state: PlannerState, config: RunnableConfig) -> Dict[str, Any]:
    req = state.request
    raw = _oracle(config).complete(generation_instruction(), render_request(req), TripPlan)
    return {"raw_output": raw, "notes": state.notes + [f"Drafted {req.days}-day plan for {req.destination}"]}


def revise_itinerary(state: PlannerState, config: RunnableConfig) -> Dict[str, Any]:
    payload = render_adjustment(dump_plan(state.current_plan), state.modification)
    raw = _oracle(config).complete(adjustment_instruction(), payload, TripPlan)
    return {"raw_output": raw, "notes": state.notes + [f"Revised plan: {state.modification.strip()}"]}


def _echo_mismatch(plan: TripPlan, req: TripRequest) -> Optional[str]:
    trip = plan.trip
    if (trip.start, trip.end) != (req.start, req.end):
        return f"plan covers {trip.start}..{trip.end}, request asked for {req.start}..{req.end}"
    if trip.budget != req.budget_inr:
        return f"plan budget {trip.budget:g} differs from requested {req.budget_inr:g}"
    per_person = plan.totals.per_person
    if per_person is not None:
        share = plan.totals.est / max(1, req.travelers)
        if abs(per_person - share) > PER_PERSON_TOLERANCE:
            return f"perPerson {per_person:g} does not match est / {req.travelers} travelers ({share:.2f})"
    return None


def validate_output(state: PlannerState) -> Dict[str, Any]:
    if state.raw_output is None:
        return {"error": "AI returned no itinerary."}
    try:
        plan = validate_plan(state.raw_output)
    except ValidationError as e:
        return {"error": f"AI itinerary does not match the schema: {e.summary()}"}
    if state.mode == "generate":
        mismatch = _echo_mismatch(plan, state.request)
        if mismatch:
            return {"error": f"AI itinerary ignores the request: {mismatch}"}
    return {"plan": plan}


def preserve_places(state: PlannerState) -> Dict[str, Any]:
    plan, restored = preserve_place_ids(state.current_plan, state.plan)
    for note in restored:
        logger.info("kept place ids: %s", note)
    return {"plan": plan, "notes": state.notes + restored}


# Build graph
graph = StateGraph(PlannerState)
graph.add_node("draft", draft_itinerary)
graph.add_node("revise", revise_itinerary)
graph.add_node("validate", validate_output)
graph.add_node("preserve", preserve_places)


def _route_start(state: PlannerState):
    return "revise" if state.mode == "adjust" else "draft"


def _route_validated(state: PlannerState):
    if state.error:
        return "end"
    return "preserve" if state.mode == "adjust" else "end"


graph.add_conditional_edges(START, _route_start, {"draft": "draft", "revise": "revise"})
graph.add_edge("draft", "validate")
graph.add_edge("revise", "validate")
graph.add_conditional_edges("validate", _route_validated, {"preserve": "preserve", "end": END})
graph.add_edge("preserve", END)

app_graph = graph.compile()


def _as_state(result: Any) -> PlannerState:
    if isinstance(result, PlannerState):
        return result
    return PlannerState(**result)


def _config(oracle: Optional[Oracle]) -> RunnableConfig:
    return {"configurable": {"oracle": oracle}}


def _generation_input(request: Any) -> PlannerState:
    return PlannerState(mode="generate", request=validate_request(request))


def _adjustment_input(current_plan: Any, modification_text: str) -> PlannerState:
    current = validate_plan(current_plan)
    if not (modification_text or "").strip():
        raise ValidationError("modification text must not be empty")
    return PlannerState(mode="adjust", current_plan=current, modification=modification_text)


def _finish(result: Any, failure: type) -> TripPlan:
    state = _as_state(result)
    if state.error or state.plan is None:
        reason = state.error or "AI failed to generate a response that conforms to the schema."
        logger.warning("%s: %s", failure.__name__, reason)
        raise failure(reason)
    return state.plan


def generate(request: Any, oracle: Optional[Oracle] = None) -> TripPlan:
    """Request -> validated plan. All or nothing: raises GenerationFailed, never returns a partial plan."""
    result = app_graph.invoke(_generation_input(request), config=_config(oracle))
    return _finish(result, GenerationFailed)


def adjust(current_plan: Any, modification_text: str, oracle: Optional[Oracle] = None) -> TripPlan:
    """Current plan + change request -> brand-new validated plan.

    `current_plan` may be a TripPlan, a mapping or its JSON string. On
    AdjustmentFailed the caller keeps showing the plan it passed in.
    """
    result = app_graph.invoke(_adjustment_input(current_plan, modification_text), config=_config(oracle))
    return _finish(result, AdjustmentFailed)


async def agenerate(request: Any, oracle: Optional[Oracle] = None) -> TripPlan:
    result = await app_graph.ainvoke(_generation_input(request), config=_config(oracle))
    return _finish(result, GenerationFailed)


async def aadjust(current_plan: Any, modification_text: str, oracle: Optional[Oracle] = None) -> TripPlan:
    result = await app_graph.ainvoke(_adjustment_input(current_plan, modification_text), config=_config(oracle))
    return _finish(result, AdjustmentFailed)
