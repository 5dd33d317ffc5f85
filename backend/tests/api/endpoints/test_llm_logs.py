"""
Tests for api.llm_logs module.
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.llm_logs import router
from services.llm_service import LLMService, get_llm_service


@pytest.fixture
def llm_service(test_settings) -> LLMService:
    service = LLMService(test_settings)
    service.llm_logger.log_call(
        call_id="call-ok",
        model="gemini/gemini-1.5-flash",
        prompt="prompt 1",
        response='{"headline": "ok"}',
        duration_ms=850.0,
        tokens_used=400,
        metadata={"zip_code": "90210", "hazard_type": "wildfire", "severity": 4}
    )
    service.llm_logger.log_call(
        call_id="call-failed",
        model="gemini/gemini-1.5-flash",
        prompt="prompt 2",
        response="",
        duration_ms=120.0,
        error="HTTP 503",
        metadata={"zip_code": "90022", "hazard_type": "flood", "severity": 3}
    )
    return service


@pytest.fixture
def client(llm_service) -> TestClient:
    app = FastAPI()
    app.include_router(router, prefix="/api/llm")
    app.dependency_overrides[get_llm_service] = lambda: llm_service
    return TestClient(app)


@pytest.mark.api
class TestLLMLogsEndpoints:
    """Test LLM call log endpoints."""

    def test_get_logs(self, client):
        response = client.get("/api/llm/logs")

        assert response.status_code == 200
        data = response.json()
        assert data["date"] == "today"
        assert data["total_calls"] == 2

    def test_get_logs_for_empty_date(self, client):
        response = client.get("/api/llm/logs", params={"date": "19990101"})

        assert response.status_code == 200
        assert response.json()["total_calls"] == 0

    def test_invalid_date(self, client):
        response = client.get("/api/llm/logs", params={"date": "2024-01-01"})

        assert response.status_code == 400

    def test_stats(self, client):
        response = client.get("/api/llm/stats")

        stats = response.json()["stats"]
        assert stats["total_calls"] == 2
        assert stats["errors"] == 1
        assert stats["total_tokens"] == 400

    def test_search_by_error(self, client):
        response = client.get("/api/llm/logs/search", params={"has_error": "true"})

        data = response.json()
        assert data["total_results"] == 1
        assert data["logs"][0]["call_id"] == "call-failed"

    def test_search_by_zip_code(self, client):
        response = client.get("/api/llm/logs/search", params={"zip_code": "90210"})

        data = response.json()
        assert data["total_results"] == 1
        assert data["logs"][0]["metadata"]["hazard_type"] == "wildfire"

    def test_search_by_duration(self, client):
        response = client.get("/api/llm/logs/search", params={"min_duration": 500})

        assert [log["call_id"] for log in response.json()["logs"]] == ["call-ok"]

    def test_get_log_by_id(self, client):
        response = client.get("/api/llm/logs/call-ok")

        assert response.status_code == 200
        assert response.json()["prompt"] == "prompt 1"

    def test_get_log_by_id_not_found(self, client):
        response = client.get("/api/llm/logs/missing")

        assert response.status_code == 404
