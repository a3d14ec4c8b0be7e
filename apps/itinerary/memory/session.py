import logging
import threading
from typing import Any, Callable, List, Optional

from ..errors import SessionBusy, ValidationError
from ..graph import adjust, generate
from ..models.schemas import TripPlan, validate_plan
from ..oracle import Oracle

logger = logging.getLogger(__name__)


class PlanSession:
    """Holds the one current plan of a planning session.

    Single writer: while a generate/adjust call is outstanding a second one
    raises SessionBusy instead of queueing. A failed call leaves the current
    plan untouched. After `discard()` the result of the call that was in
    flight is dropped when it arrives.
    """

    def __init__(self, oracle: Optional[Oracle] = None):
        self.oracle = oracle
        self.history: List[TripPlan] = []
        self._current: Optional[TripPlan] = None
        self._lock = threading.Lock()
        self._epoch = 0

    @property
    def current(self) -> Optional[TripPlan]:
        return self._current

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def _mutate(self, call: Callable[[], TripPlan]) -> Optional[TripPlan]:
        if not self._lock.acquire(blocking=False):
            raise SessionBusy("a change to this plan is already in progress")
        epoch = self._epoch
        try:
            plan = call()
        finally:
            self._lock.release()
        if epoch != self._epoch:
            logger.info("dropping result of an abandoned call")
            return None
        if self._current is not None:
            self.history.append(self._current)
        self._current = plan
        return plan

    def start(self, request: Any) -> Optional[TripPlan]:
        return self._mutate(lambda: generate(request, self.oracle))

    def revise(self, modification_text: str) -> Optional[TripPlan]:
        base = self._current
        if base is None:
            raise ValidationError("there is no plan to adjust yet")
        return self._mutate(lambda: adjust(base, modification_text, self.oracle))

    def load(self, plan: Any) -> TripPlan:
        """Make a saved plan current without calling the oracle."""
        if self.busy:
            raise SessionBusy("a change to this plan is already in progress")
        plan = validate_plan(plan)
        if self._current is not None:
            self.history.append(self._current)
        self._current = plan
        return plan

    def undo(self) -> Optional[TripPlan]:
        if self.busy:
            raise SessionBusy("a change to this plan is already in progress")
        if self.history:
            self._current = self.history.pop()
        return self._current

    def discard(self):
        """Abandon the outstanding call, if any. Its result will be ignored."""
        self._epoch += 1
