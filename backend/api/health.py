"""
Health check endpoints for the Personalized Disaster Alert API.
"""

from datetime import datetime, timezone
from typing import Dict, Any

from fastapi import APIRouter
from fastapi.responses import JSONResponse
import structlog

from core.exceptions import ConfigurationError
from services.error_handler import get_all_error_statistics
from services.llm_service import get_llm_service
from services.location_service import get_location_repository

logger = structlog.get_logger(__name__)
router = APIRouter()

SERVICE_NAME = "Personalized Disaster Alert API"
SERVICE_VERSION = "1.0.0"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health")
async def health_check() -> Dict[str, Any]:
    """
    Health check endpoint (liveness probe).
    Returns basic service health status.
    """
    return {
        "status": "ok",
        "timestamp": _now(),
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION
    }


@router.get("/ready")
async def readiness_check() -> JSONResponse:
    """
    Readiness check endpoint.
    Verifies that the location reference data is loaded. A missing LLM
    provider is reported but does not fail readiness, since alerts fall back
    to generic guidance.
    """
    checks = {}
    overall_ready = True

    # Reference data
    try:
        locations = get_location_repository()
        checks["reference_data"] = {
            "status": "ready",
            "details": f"{len(locations)} ZIP codes loaded"
        }
    except ConfigurationError as e:
        checks["reference_data"] = {"status": "not_ready", "error": str(e)}
        overall_ready = False

    # Text generation
    llm_service = get_llm_service()
    if llm_service.is_available():
        checks["text_generation"] = {
            "status": "ready",
            "details": f"Model configured: {llm_service.model_name}"
        }
    else:
        checks["text_generation"] = {
            "status": "not_ready",
            "error": "No LLM API key configured - alerts will use the fallback payload"
        }

    status_code = 200 if overall_ready else 503

    return JSONResponse(
        content={
            "status": "ready" if overall_ready else "not_ready",
            "timestamp": _now(),
            "checks": checks
        },
        status_code=status_code
    )


@router.get("/system-metrics")
async def system_metrics_endpoint() -> Dict[str, Any]:
    """
    Service metrics in JSON format: today's LLM call statistics and error
    statistics per service.
    """
    return {
        "timestamp": _now(),
        "metrics": {
            "llm": get_llm_service().get_stats(),
            "errors": get_all_error_statistics()
        }
    }
