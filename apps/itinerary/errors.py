from typing import Any, Dict, List, Optional


class ItineraryError(Exception):
    """Base class for every error raised by the planner."""


class ValidationError(ItineraryError):
    """Malformed caller input or oracle output that failed the schema."""

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.errors = errors or []

    def summary(self, limit: int = 5) -> str:
        parts = []
        for err in self.errors[:limit]:
            loc = ".".join(str(p) for p in err.get("loc", ()))
            parts.append(f"{loc}: {err.get('msg', '')}" if loc else str(err.get("msg", "")))
        if len(self.errors) > limit:
            parts.append(f"... {len(self.errors) - limit} more")
        return "; ".join(parts) or str(self)


class ExtractionFailed(ItineraryError):
    """The oracle could not turn free text into a partial request. Never fatal."""


class GenerationFailed(ItineraryError):
    """The oracle produced no usable plan for a request."""


class AdjustmentFailed(ItineraryError):
    """The oracle produced no usable revision; the prior plan stays current."""


class SessionBusy(ItineraryError):
    """A mutation is already in flight for this plan session."""
