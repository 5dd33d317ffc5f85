"""
Alert Generation Client

Sends the composed prompt to the text-generation backend and turns the reply
into an AlertPayload. Any failure on that path (backend unavailable, provider
error, malformed or incomplete JSON) yields the fixed fallback alert instead of
an exception.
"""

import copy
import json
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

import structlog

from models.schemas import AlertPayload
from services.error_handler import AlertErrorCode, ErrorHandler, get_error_handler
from services.llm_service import LLMService, get_llm_service

logger = structlog.get_logger(__name__)

_LEADING_FENCE = re.compile(r"^```(?:json)?[ \t]*\n?", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"\n?```$")

FALLBACK_ALERT: Dict[str, Any] = {
    "primaryLanguage": "English",
    "secondaryLanguages": ["Spanish"],
    "readingLevel": "medium",
    "urgencyLevel": 4,
    "headline": "⚠️ Emergency Alert - Take Action Now",
    "body": (
        "A natural disaster is affecting your area. Follow official guidance from local "
        "authorities. Evacuate if ordered. Stay informed through emergency broadcasts. "
        "Ensure you have emergency supplies ready including water, food, and medications."
    ),
    "actions": [
        "Monitor local news and emergency alerts",
        "Prepare or grab your emergency kit",
        "Follow evacuation orders immediately if issued",
        "Stay away from windows and hazardous areas",
        "Keep phone charged and limit non-emergency calls",
    ],
    "specialConsiderations": [
        "If you have mobility limitations, arrange transportation assistance now",
        "Families with children should pack comfort items and maintain calm",
        "Individuals with medical needs should secure medication and medical equipment",
    ],
    "translations": {
        "Spanish": {
            "headline": "⚠️ Alerta de Emergencia - Actúe Ahora",
            "body": (
                "Un desastre natural está afectando su área. Siga la guía oficial de las "
                "autoridades locales. Evacúe si se le ordena. Manténgase informado a través de "
                "transmisiones de emergencia. Asegúrese de tener suministros de emergencia "
                "listos incluyendo agua, comida y medicamentos."
            ),
        }
    },
}


def get_fallback_alert() -> AlertPayload:
    """Get a fresh copy of the fallback alert."""
    return AlertPayload.model_validate(copy.deepcopy(FALLBACK_ALERT))


def strip_code_fences(text: str) -> str:
    """Remove a leading ```/```json fence, a trailing ``` fence and surrounding whitespace."""
    text = text.strip()
    text = _LEADING_FENCE.sub("", text)
    text = _TRAILING_FENCE.sub("", text)
    return text.strip()


def parse_alert_payload(text: str) -> AlertPayload:
    """
    Parse a model reply into an AlertPayload.

    Raises:
        json.JSONDecodeError: if the reply is not JSON
        pydantic.ValidationError: if required fields are missing or invalid
    """
    return AlertPayload.model_validate(json.loads(strip_code_fences(text)))


@dataclass(frozen=True)
class GenerationResult:
    """Outcome of one generation attempt: a payload or the reason it failed."""
    payload: Optional[AlertPayload] = None
    failure: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.payload is not None


class AlertGenerationClient:
    """Generates personalized alerts through the shared LLM service."""

    def __init__(
        self,
        llm_service: Optional[LLMService] = None,
        error_handler: Optional[ErrorHandler] = None
    ):
        self.llm_service = llm_service or get_llm_service()
        self.error_handler = error_handler or get_error_handler("alert_generation")

    async def request(self, prompt: str, metadata: Optional[Dict[str, Any]] = None) -> GenerationResult:
        """Single generation attempt. Never raises."""
        try:
            reply = await self.llm_service.generate_text(prompt, metadata=metadata)
            return GenerationResult(payload=parse_alert_payload(reply))
        except Exception as e:
            return GenerationResult(failure=e)

    async def invoke(self, prompt: str, metadata: Optional[Dict[str, Any]] = None) -> AlertPayload:
        """
        Generate a personalized alert for a prompt.

        There are no retries: a failed attempt is replaced by the fallback
        alert immediately.

        Args:
            prompt: Composed alert prompt
            metadata: Optional context recorded with the LLM call log

        Returns:
            Parsed alert, or the fallback alert if generation failed
        """
        result = await self.request(prompt, metadata=metadata)
        if result.ok:
            logger.info(
                "Generated personalized alert",
                primary_language=result.payload.primary_language,
                secondary_languages=result.payload.secondary_languages,
                urgency_level=result.payload.urgency_level,
            )
            return result.payload

        self.error_handler.handle_error(
            error=result.failure,
            code=AlertErrorCode.GENERATION_FAILED,
            operation="generate_alert",
            context=metadata,
        )
        return get_fallback_alert()
