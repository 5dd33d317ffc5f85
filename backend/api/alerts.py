"""
Alert API for the Personalized Disaster Alert service.
Provides the alert generation endpoint and the list of demo ZIP codes.
"""

import re
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
import structlog

from core.exceptions import LocationNotFoundError
from models.schemas import AlertRequest
from services.alert_service import AlertService, get_alert_service
from services.error_handler import AlertErrorCode, get_error_handler
from services.location_service import LocationRepository, get_location_repository

logger = structlog.get_logger(__name__)
router = APIRouter()

ZIP_CODE_PATTERN = re.compile(r"^[0-9]{5}$")

error_handler = get_error_handler("alerts_api")


def is_valid_zip_code(zip_code: Optional[str]) -> bool:
    """A ZIP code is exactly five ASCII digits."""
    return bool(zip_code) and ZIP_CODE_PATTERN.fullmatch(zip_code) is not None


async def read_alert_request(request: Request) -> AlertRequest:
    """Alert request from the body. A body that is not a JSON object has no ZIP code."""
    try:
        body = await request.json()
    except ValueError:
        body = None
    return AlertRequest.model_validate(body if isinstance(body, dict) else {})


@router.post("/generate-alert")
async def generate_alert(
    alert_request: AlertRequest = Depends(read_alert_request),
    service: AlertService = Depends(get_alert_service)
):
    """
    Generate a personalized disaster alert for a ZIP code.

    Returns the generated scenario, the alert content (with translations) and
    the resolved location. Text generation failures never fail the request:
    a generic fallback alert is returned instead.
    """
    zip_code = alert_request.zip_code

    if not is_valid_zip_code(zip_code):
        error_handler.handle_error(
            error=f"Invalid ZIP code: {zip_code!r}",
            code=AlertErrorCode.INVALID_ZIP_CODE,
            operation="generate_alert"
        )
        return JSONResponse(
            status_code=400,
            content={
                "error": "Invalid ZIP code format",
                "message": "ZIP code must be exactly 5 digits"
            }
        )

    try:
        response = await service.build_alert(zip_code)
        return response.model_dump(by_alias=True, mode="json")

    except LocationNotFoundError as e:
        error_handler.handle_error(
            error=e,
            code=AlertErrorCode.LOCATION_NOT_FOUND,
            operation="generate_alert",
            context={"zip_code": zip_code}
        )
        return JSONResponse(
            status_code=404,
            content={
                "error": "ZIP code not found",
                "message": "This ZIP code is not in our demo database",
                "availableZipCodes": e.available_codes
            }
        )

    except Exception as e:
        recorded = error_handler.handle_error(
            error=e,
            operation="generate_alert",
            context={"zip_code": zip_code}
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "message": recorded.user_message,
                "errorId": recorded.error_id
            }
        )


@router.get("/locations")
async def list_locations(
    locations: LocationRepository = Depends(get_location_repository)
) -> Dict[str, Any]:
    """List the demo ZIP codes with their neighborhood names."""
    summaries: List[Dict[str, str]] = [
        summary.model_dump() for summary in locations.list_locations()
    ]
    return {
        "total": len(summaries),
        "locations": summaries
    }
