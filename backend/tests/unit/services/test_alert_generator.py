"""
Unit tests for the alert generation client.
"""

import json
from unittest.mock import AsyncMock

import pytest

from core.exceptions import LLMServiceError, LLMUnavailableError
from services.alert_generator import (
    FALLBACK_ALERT, AlertGenerationClient, GenerationResult, get_fallback_alert,
    parse_alert_payload, strip_code_fences
)
from services.error_handler import HISTORY_LIMIT, AlertErrorCode
from services.llm_service import LLMService


class TestStripCodeFences:
    """Test fence stripping."""

    def test_plain_json_untouched(self):
        assert strip_code_fences('{"a": 1}') == '{"a": 1}'

    def test_json_fence(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence(self):
        assert strip_code_fences('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_surrounding_whitespace(self):
        assert strip_code_fences('  \n```JSON\n{"a": 1}\n```  \n') == '{"a": 1}'


class TestFallbackAlert:
    """Test the fixed fallback payload."""

    def test_fallback_contents(self):
        fallback = get_fallback_alert()

        assert fallback.primary_language == "English"
        assert fallback.secondary_languages == ["Spanish"]
        assert fallback.reading_level.value == "medium"
        assert fallback.urgency_level == 4
        assert len(fallback.actions) == 5
        assert len(fallback.special_considerations) == 3
        assert set(fallback.translations) == {"Spanish"}

    def test_fallback_copies_are_independent(self):
        first = get_fallback_alert()
        first.actions.append("Mutated")
        first.translations["Spanish"].headline = "Mutated"

        second = get_fallback_alert()
        assert "Mutated" not in second.actions
        assert second.translations["Spanish"].headline == FALLBACK_ALERT["translations"]["Spanish"]["headline"]


class TestParseAlertPayload:
    """Test reply parsing."""

    def test_parse_fenced_reply(self, valid_alert_data):
        reply = "```json\n" + json.dumps(valid_alert_data) + "\n```"

        payload = parse_alert_payload(reply)

        assert payload.primary_language == "English"
        assert payload.secondary_languages == ["Persian", "Spanish"]
        assert payload.translations["Spanish"].headline == "Alerta de incendio"

    def test_invalid_json_raises(self):
        with pytest.raises(json.JSONDecodeError):
            parse_alert_payload("Sorry, I cannot help with that.")

    def test_missing_fields_raise(self, valid_alert_data):
        del valid_alert_data["headline"]

        with pytest.raises(ValueError):
            parse_alert_payload(json.dumps(valid_alert_data))


class TestAlertGenerationClient:
    """Test AlertGenerationClient.invoke and request."""

    @pytest.mark.asyncio
    async def test_successful_generation(self, generation_client, mock_llm_service):
        payload = await generation_client.invoke("prompt", metadata={"zip_code": "90210"})

        assert payload.headline == "🔥 Wildfire Warning for Beverly Hills"
        assert payload.urgency_level == 4
        mock_llm_service.generate_text.assert_awaited_once_with("prompt", metadata={"zip_code": "90210"})

    @pytest.mark.asyncio
    async def test_request_returns_result(self, generation_client):
        result = await generation_client.request("prompt")

        assert isinstance(result, GenerationResult)
        assert result.ok
        assert result.failure is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("failure", [
        LLMUnavailableError("LLM not available"),
        LLMServiceError("HTTP 503"),
        RuntimeError("connection reset"),
    ])
    async def test_backend_failure_returns_fallback(self, mock_llm_service, error_handler, failure):
        mock_llm_service.generate_text = AsyncMock(side_effect=failure)
        client = AlertGenerationClient(llm_service=mock_llm_service, error_handler=error_handler)

        payload = await client.invoke("prompt")

        assert payload == get_fallback_alert()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("reply", [
        "not json at all",
        "",
        '{"headline": "only a headline"}',
        '["a", "list"]',
        '{"primaryLanguage": "English", "urgencyLevel": 9}',
    ])
    async def test_unusable_reply_returns_fallback(self, mock_llm_service, error_handler, reply):
        mock_llm_service.generate_text = AsyncMock(return_value=reply)
        client = AlertGenerationClient(llm_service=mock_llm_service, error_handler=error_handler)

        result = await client.request("prompt")
        payload = await client.invoke("prompt")

        assert not result.ok
        assert result.failure is not None
        assert payload == get_fallback_alert()

    @pytest.mark.asyncio
    async def test_failure_is_recorded(self, mock_llm_service, error_handler):
        mock_llm_service.generate_text = AsyncMock(side_effect=LLMServiceError("boom"))
        client = AlertGenerationClient(llm_service=mock_llm_service, error_handler=error_handler)

        await client.invoke("prompt", metadata={"zip_code": "90210"})

        assert len(error_handler.error_history) == 1
        recorded = error_handler.error_history[0]
        assert recorded.code == AlertErrorCode.GENERATION_FAILED
        assert recorded.operation == "generate_alert"
        assert recorded.context == {"zip_code": "90210"}

    @pytest.mark.asyncio
    async def test_repeated_failures_keep_bounded_history(self, mock_llm_service, error_handler):
        mock_llm_service.generate_text = AsyncMock(side_effect=LLMServiceError("outage"))
        client = AlertGenerationClient(llm_service=mock_llm_service, error_handler=error_handler)

        for _ in range(HISTORY_LIMIT * 3):
            await client.invoke("prompt")

        assert len(error_handler.error_history) == HISTORY_LIMIT
        assert error_handler.error_counts[AlertErrorCode.GENERATION_FAILED] == HISTORY_LIMIT * 3

    @pytest.mark.asyncio
    async def test_no_retries(self, mock_llm_service, error_handler):
        mock_llm_service.generate_text = AsyncMock(side_effect=LLMServiceError("boom"))
        client = AlertGenerationClient(llm_service=mock_llm_service, error_handler=error_handler)

        await client.invoke("prompt")

        assert mock_llm_service.generate_text.await_count == 1

    @pytest.mark.asyncio
    async def test_unconfigured_service_falls_back(self, test_settings, error_handler):
        """With no provider keys the real service is unavailable and the fallback is used."""
        client = AlertGenerationClient(llm_service=LLMService(test_settings), error_handler=error_handler)

        payload = await client.invoke("prompt")

        assert payload == get_fallback_alert()
