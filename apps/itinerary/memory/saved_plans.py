import json
import logging
import os
import threading
from typing import Any, Dict, List, Optional

from ..config import settings
from ..errors import ValidationError
from ..models.schemas import TripPlan, dump_plan, validate_plan

logger = logging.getLogger(__name__)


class SavedPlanStore:
    """Local cache of saved plans, keyed by trip title.

    Titles are the key: saving a plan whose title is already stored replaces
    the earlier one. This is a cache, not a database.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = path or settings.SAVED_PLANS_PATH
        self._guard = threading.Lock()

    def _read(self) -> List[Dict[str, Any]]:
        if not os.path.exists(self.path):
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("saved plans unreadable at %s: %s", self.path, e)
            return []
        if not isinstance(data, list):
            logger.warning("saved plans at %s is not a list, ignoring", self.path)
            return []
        return [d for d in data if isinstance(d, dict)]

    def _write(self, data: List[Dict[str, Any]]):
        os.makedirs(os.path.dirname(os.path.abspath(self.path)), exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    @staticmethod
    def _title(entry: Dict[str, Any]) -> Optional[str]:
        trip = entry.get("trip")
        return trip.get("title") if isinstance(trip, dict) else None

    def list_plans(self) -> List[TripPlan]:
        plans = []
        for entry in self._read():
            try:
                plans.append(validate_plan(entry))
            except ValidationError as e:
                logger.warning("skipping saved plan %r: %s", self._title(entry), e.summary())
        return plans

    def titles(self) -> List[str]:
        return [p.trip.title for p in self.list_plans()]

    def get(self, title: str) -> Optional[TripPlan]:
        for plan in self.list_plans():
            if plan.trip.title == title:
                return plan
        return None

    def save(self, plan: TripPlan) -> bool:
        """Store a plan. Returns True when it replaced one with the same title."""
        title = plan.trip.title
        with self._guard:
            data = self._read()
            kept = [d for d in data if self._title(d) != title]
            replaced = len(kept) != len(data)
            if replaced:
                logger.warning("saved plan %r overwritten by a newer plan with the same title", title)
            kept.append(dump_plan(plan))
            self._write(kept)
        return replaced

    def delete(self, title: str) -> bool:
        with self._guard:
            data = self._read()
            kept = [d for d in data if self._title(d) != title]
            if len(kept) == len(data):
                return False
            self._write(kept)
        return True
