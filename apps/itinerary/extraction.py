import datetime as dt
import logging
from typing import Any, Dict, Optional

from .config import settings
from .errors import ExtractionFailed, ValidationError
from .models.schemas import TripDetails, validate_details
from .oracle import GroqOracle, Oracle
from .prompts import extraction_instruction

logger = logging.getLogger(__name__)


def extract_trip_details(text: str, oracle: Optional[Oracle] = None,
                         today: Optional[dt.date] = None) -> TripDetails:
    """Best-effort free text -> partial request.

    Raises ValidationError when the text is too short to be worth a call, and
    ExtractionFailed when the oracle reply does not parse. Callers should treat
    the latter as "keep what the user typed" and carry on.
    """
    text = (text or "").strip()
    if len(text) < settings.MIN_EXTRACTION_CHARS:
        raise ValidationError(f"need at least {settings.MIN_EXTRACTION_CHARS} characters to extract trip details")

    oracle = oracle or GroqOracle()
    raw = oracle.complete(extraction_instruction(today or dt.date.today()), text, TripDetails)
    if raw is None:
        raise ExtractionFailed("AI failed to extract trip details.")
    try:
        return validate_details(raw)
    except ValidationError as e:
        logger.info("extraction output rejected: %s", e.summary())
        raise ExtractionFailed(f"Could not extract trip details: {e.summary()}") from e


def merge_details(details: TripDetails, base: Dict[str, Any]) -> Dict[str, Any]:
    """Overlay extracted fields on a request-shaped form; absent fields keep the form value."""
    merged = dict(base)
    found = details.model_dump(mode="json", by_alias=True, exclude_none=True)
    city = found.pop("city", None)
    if city:
        merged["destination"] = city
    merged.update(found)
    return merged
