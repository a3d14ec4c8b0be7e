import json
import logging
import re
from typing import Any, Dict, Optional, Protocol, Type, Union

from langchain_core.messages import HumanMessage, SystemMessage
from pydantic import BaseModel

from .config import settings

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


class Oracle(Protocol):
    """Anything that turns (instruction, input) into a JSON object, or None."""

    def complete(
        self,
        instruction: str,
        payload: Union[str, Dict[str, Any]],
        schema: Optional[Type[BaseModel]] = None,
    ) -> Optional[Dict[str, Any]]:
        ...


def parse_json_object(content: Any) -> Optional[Dict[str, Any]]:
    """Decode an oracle reply. Anything but a JSON object yields None."""
    if not isinstance(content, str):
        return None
    text = _FENCE_RE.sub("", content.strip())
    if not text:
        return None
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        # some models wrap the object in a sentence despite JSON mode
        start, end = text.find("{"), text.rfind("}")
        if start < 0 or end <= start:
            return None
        try:
            data = json.loads(text[start:end + 1])
        except json.JSONDecodeError:
            return None
    return data if isinstance(data, dict) else None


def schema_hint(schema: Type[BaseModel]) -> str:
    return json.dumps(schema.model_json_schema(by_alias=True), ensure_ascii=False)


class GroqOracle:
    """Groq-hosted chat model in JSON mode. One call per `complete`, no retries."""

    def __init__(self, model: Optional[str] = None, temperature: Optional[float] = None,
                 timeout: Optional[float] = None, api_key: Optional[str] = None, llm=None):
        self.model = model or settings.MODEL
        self.temperature = settings.TEMPERATURE if temperature is None else temperature
        self.timeout = timeout or settings.TIMEOUT
        self.api_key = api_key or settings.GROQ_API_KEY
        self._llm = llm

    def _client(self):
        if self._llm is None:
            from langchain_groq import ChatGroq
            llm = ChatGroq(
                model=self.model,
                temperature=self.temperature,
                timeout=self.timeout,
                max_retries=0,
                api_key=self.api_key,
            )
            self._llm = llm.bind(response_format={"type": "json_object"})
        return self._llm

    def complete(self, instruction, payload, schema=None):
        system = instruction
        if schema is not None:
            system += "\n\nThe JSON object must validate against this JSON Schema:\n" + schema_hint(schema)
        if not isinstance(payload, str):
            payload = json.dumps(payload, ensure_ascii=False)
        messages = [SystemMessage(content=system), HumanMessage(content=payload)]
        try:
            res = self._client().invoke(messages)
        except Exception as e:
            logger.warning("oracle call failed: %s - %s", type(e).__name__, e)
            return None
        data = parse_json_object(res.content)
        if data is None:
            logger.warning("oracle returned no JSON object (%d chars)", len(str(res.content or "")))
        return data
