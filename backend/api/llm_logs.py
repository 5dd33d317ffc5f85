"""
LLM Logs API

Endpoints for reviewing the alert generation calls made to the LLM provider.
"""

import re
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
import structlog

from services.llm_service import LLMService, get_llm_service

logger = structlog.get_logger(__name__)
router = APIRouter()

DATE_PATTERN = re.compile(r"^\d{8}$")


def _check_date(date: Optional[str]) -> None:
    if date is not None and not DATE_PATTERN.match(date):
        raise HTTPException(status_code=400, detail=f"Invalid date '{date}', expected YYYYMMDD")


@router.get("/logs")
async def get_llm_logs(
    date: Optional[str] = Query(None, description="Date in YYYYMMDD format, defaults to today"),
    llm_service: LLMService = Depends(get_llm_service)
):
    """
    Get LLM call logs for a specific date.

    Returns the prompt, reply, timing and metadata (ZIP code, hazard type,
    severity) of every alert generation call.
    """
    _check_date(date)
    logs = llm_service.get_logs(date)

    return {
        "date": date or "today",
        "total_calls": len(logs),
        "logs": logs
    }


@router.get("/stats")
async def get_llm_stats(
    date: Optional[str] = Query(None, description="Date in YYYYMMDD format, defaults to today"),
    llm_service: LLMService = Depends(get_llm_service)
):
    """Get aggregated call count, duration, token and error statistics for a date."""
    _check_date(date)
    return {
        "date": date or "today",
        "stats": llm_service.get_stats(date)
    }


@router.get("/logs/search")
async def search_llm_logs(
    date: Optional[str] = Query(None, description="Date in YYYYMMDD format"),
    model: Optional[str] = Query(None, description="Filter by model name"),
    zip_code: Optional[str] = Query(None, description="Filter by ZIP code"),
    min_duration: Optional[float] = Query(None, description="Minimum duration in ms"),
    has_error: Optional[bool] = Query(None, description="Filter by error status"),
    llm_service: LLMService = Depends(get_llm_service)
):
    """Search and filter LLM call logs."""
    _check_date(date)
    logs: List[Dict[str, Any]] = llm_service.get_logs(date)

    if model:
        logs = [log for log in logs if log.get('model') == model]

    if zip_code:
        logs = [log for log in logs if (log.get('metadata') or {}).get('zip_code') == zip_code]

    if min_duration is not None:
        logs = [log for log in logs if log.get('duration_ms', 0) >= min_duration]

    if has_error is not None:
        if has_error:
            logs = [log for log in logs if log.get('error') is not None]
        else:
            logs = [log for log in logs if log.get('error') is None]

    return {
        "date": date or "today",
        "filters": {
            "model": model,
            "zip_code": zip_code,
            "min_duration": min_duration,
            "has_error": has_error
        },
        "total_results": len(logs),
        "logs": logs
    }


@router.get("/logs/{call_id}")
async def get_llm_log_by_id(
    call_id: str,
    date: Optional[str] = Query(None, description="Date in YYYYMMDD format, defaults to today"),
    llm_service: LLMService = Depends(get_llm_service)
):
    """Get a single LLM call by ID."""
    _check_date(date)
    log = next((log for log in llm_service.get_logs(date) if log.get('call_id') == call_id), None)

    if not log:
        raise HTTPException(status_code=404, detail=f"Log entry {call_id} not found")

    return log
