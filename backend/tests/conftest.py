"""
Pytest configuration and shared fixtures for the backend test suite.
"""

import json
import os
import shutil
import tempfile
from datetime import datetime, timezone
from typing import Any, Dict, Generator
from unittest.mock import AsyncMock, Mock

# Keep test runs away from real log directories and provider keys.
_TEST_LOG_ROOT = tempfile.mkdtemp(prefix="alert_tests_")
os.environ["LLM_LOG_DIR"] = os.path.join(_TEST_LOG_ROOT, "llm_logs")
os.environ["ERROR_LOG_DIR"] = os.path.join(_TEST_LOG_ROOT, "errors")
for _key in ("GEMINI_API_KEY", "ANTHROPIC_API_KEY", "OPENAI_API_KEY", "LLM_MODEL"):
    os.environ[_key] = ""

import pytest
from fastapi.testclient import TestClient

from core.config import Settings
from main import create_application
from models.schemas import LocationProfile, ScenarioRecord
from services.alert_generator import AlertGenerationClient
from services.alert_service import AlertService, get_alert_service
from services.error_handler import ErrorHandler
from services.llm_service import LLMService, get_llm_service
from services.location_service import LocationRepository, get_location_repository


@pytest.fixture
def temp_log_dir() -> Generator[str, None, None]:
    """Create a temporary directory for log files."""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def test_settings(temp_log_dir) -> Settings:
    """Create test settings with safe defaults and no provider keys."""
    return Settings(
        DEBUG=True,
        HOST="127.0.0.1",
        PORT=8001,
        GEMINI_API_KEY=None,
        ANTHROPIC_API_KEY=None,
        OPENAI_API_KEY=None,
        LLM_LOG_DIR=os.path.join(temp_log_dir, "llm_logs"),
        ERROR_LOG_DIR=os.path.join(temp_log_dir, "errors"),
        ALLOWED_ORIGINS="http://localhost:5173"
    )


@pytest.fixture
def sample_profile_data() -> Dict[str, Any]:
    """Raw profile data shaped like an entry of locations.yml."""
    return {
        "neighborhood": "Beverly Hills, CA",
        "languages": {"English": 65.2, "Persian": 18.4, "Spanish": 8.3, "Hebrew": 4.1, "Other": 4.0},
        "median_age": 44,
        "median_income": 87902,
        "education_level": "high",
        "geography": "Urban residential area in Los Angeles basin, coastal proximity",
        "coordinates": {"lat": 34.0901, "lng": -118.4065},
        "vulnerable_populations": {"elderly": 18.5, "children": 19.2, "disabled": 8.1},
        "historical_risks": ["wildfire", "earthquake", "flood"]
    }


@pytest.fixture
def sample_profile(sample_profile_data) -> LocationProfile:
    return LocationProfile.model_validate(sample_profile_data)


@pytest.fixture
def earthquake_profile() -> LocationProfile:
    """Single-hazard, low-education profile."""
    return LocationProfile(
        neighborhood="Test Valley, CA",
        languages={"Spanish": 70.0, "English": 30.0},
        median_age=31,
        median_income=42000,
        education_level="low",
        geography="Inland valley",
        vulnerable_populations={"elderly": 9.0, "children": 30.0, "disabled": 13.0},
        historical_risks=["earthquake"]
    )


@pytest.fixture
def location_repository(sample_profile, earthquake_profile) -> LocationRepository:
    return LocationRepository({"90210": sample_profile, "90022": earthquake_profile})


@pytest.fixture
def sample_scenario() -> ScenarioRecord:
    return ScenarioRecord(
        hazard_type="wildfire",
        severity=4,
        status="warning",
        description="Active wildfire with rapid spread potential.",
        distance=7,
        impact_time="2-4 hours",
        official_actions=(
            "Evacuate now",
            "Follow designated routes",
            "Bring medications",
            "Keep pets with you",
            "Check on neighbors"
        ),
        timestamp=datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
    )


@pytest.fixture
def valid_alert_data() -> Dict[str, Any]:
    """A well-formed model reply with camelCase keys."""
    return {
        "primaryLanguage": "English",
        "secondaryLanguages": ["Persian", "Spanish"],
        "readingLevel": "high",
        "urgencyLevel": 4,
        "headline": "🔥 Wildfire Warning for Beverly Hills",
        "body": "A wildfire is burning 7 miles from Beverly Hills and may reach the area in 2-4 hours. Prepare to evacuate now.",
        "actions": ["Pack your evacuation kit", "Close windows and doors", "Leave when ordered"],
        "specialConsiderations": ["Arrange transport for elderly neighbors", "Keep medications ready"],
        "translations": {
            "Persian": {"headline": "هشدار آتش سوزی", "body": "آتش سوزی در فاصله ۷ مایلی است."},
            "Spanish": {"headline": "Alerta de incendio", "body": "Un incendio está a 7 millas."}
        }
    }


@pytest.fixture
def mock_llm_service(valid_alert_data):
    """LLM service stub whose generate_text returns a valid alert reply."""
    service = Mock(spec=LLMService)
    service.generate_text = AsyncMock(return_value=json.dumps(valid_alert_data, ensure_ascii=False))
    service.is_available.return_value = True
    service.model_name = "test/model"
    return service


@pytest.fixture
def error_handler(temp_log_dir) -> ErrorHandler:
    return ErrorHandler("test_service", log_dir=temp_log_dir)


@pytest.fixture
def generation_client(mock_llm_service, error_handler) -> AlertGenerationClient:
    return AlertGenerationClient(llm_service=mock_llm_service, error_handler=error_handler)


@pytest.fixture
def alert_service(location_repository, generation_client) -> AlertService:
    return AlertService(locations=location_repository, client=generation_client)


@pytest.fixture
def app(alert_service, location_repository, test_settings):
    """Create FastAPI test application with stubbed dependencies."""
    application = create_application()
    application.dependency_overrides[get_alert_service] = lambda: alert_service
    application.dependency_overrides[get_location_repository] = lambda: location_repository
    application.dependency_overrides[get_llm_service] = lambda: LLMService(test_settings)
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app) -> TestClient:
    """Create test client for FastAPI app."""
    return TestClient(app)


# Custom markers
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "api: mark test as an API test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


def pytest_sessionfinish(session, exitstatus):
    shutil.rmtree(_TEST_LOG_ROOT, ignore_errors=True)
