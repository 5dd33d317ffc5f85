"""
Alert pipeline error handling.

Every failure in the alert pipeline is recorded under one of five error codes.
Each code carries a severity that picks the log level, a user-facing message
and whether the failure is appended to the daily error log. Per-service
handlers keep running counts plus a bounded window of recent errors for the
metrics endpoint.
"""

import json
import traceback
import uuid
from collections import Counter, deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Deque, Dict, Mapping, Optional, Union

import structlog

from core.config import get_settings

logger = structlog.get_logger(__name__)

# Recent errors kept in memory per handler
HISTORY_LIMIT = 100


class ErrorSeverity(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AlertErrorCode(str, Enum):
    INVALID_ZIP_CODE = "INVALID_ZIP_CODE"
    LOCATION_NOT_FOUND = "LOCATION_NOT_FOUND"
    GENERATION_FAILED = "GENERATION_FAILED"
    CONFIGURATION_DEFECT = "CONFIGURATION_DEFECT"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


@dataclass(frozen=True)
class ErrorPolicy:
    severity: ErrorSeverity
    user_message: str
    persist: bool = False


ERROR_POLICIES: Mapping[AlertErrorCode, ErrorPolicy] = MappingProxyType({
    AlertErrorCode.INVALID_ZIP_CODE: ErrorPolicy(
        ErrorSeverity.LOW, "ZIP code must be exactly 5 digits."
    ),
    AlertErrorCode.LOCATION_NOT_FOUND: ErrorPolicy(
        ErrorSeverity.LOW, "This ZIP code is not in our demo database."
    ),
    AlertErrorCode.GENERATION_FAILED: ErrorPolicy(
        ErrorSeverity.MEDIUM,
        "Personalized guidance is unavailable. Showing general emergency guidance."
    ),
    AlertErrorCode.CONFIGURATION_DEFECT: ErrorPolicy(
        ErrorSeverity.CRITICAL, "The alert service is misconfigured.", persist=True
    ),
    AlertErrorCode.UNKNOWN_ERROR: ErrorPolicy(
        ErrorSeverity.HIGH, "Failed to generate alert. Please try again.", persist=True
    ),
})

# Exception class names classified without an explicit code
EXCEPTION_CODES: Mapping[str, AlertErrorCode] = MappingProxyType({
    "ConfigurationError": AlertErrorCode.CONFIGURATION_DEFECT,
    "LocationNotFoundError": AlertErrorCode.LOCATION_NOT_FOUND,
    "LLMServiceError": AlertErrorCode.GENERATION_FAILED,
    "LLMUnavailableError": AlertErrorCode.GENERATION_FAILED,
    "JSONDecodeError": AlertErrorCode.GENERATION_FAILED,
    "ValidationError": AlertErrorCode.GENERATION_FAILED,
})


def classify(error: Union[Exception, str]) -> AlertErrorCode:
    """Error code for an unclassified failure."""
    if isinstance(error, Exception):
        return EXCEPTION_CODES.get(type(error).__name__, AlertErrorCode.UNKNOWN_ERROR)
    return AlertErrorCode.UNKNOWN_ERROR


@dataclass
class AlertError:
    """A recorded failure."""

    error_id: str
    code: AlertErrorCode
    message: str
    service_name: str
    operation: str
    timestamp: str
    context: Dict[str, Any] = field(default_factory=dict)
    technical_details: Optional[str] = None

    @property
    def policy(self) -> ErrorPolicy:
        return ERROR_POLICIES[self.code]

    @property
    def severity(self) -> ErrorSeverity:
        return self.policy.severity

    @property
    def user_message(self) -> str:
        return self.policy.user_message

    def log_fields(self) -> Dict[str, Any]:
        return {
            "error_id": self.error_id,
            "error_code": self.code.value,
            "message": self.message,
            "severity": self.severity.value,
            "service": self.service_name,
            "operation": self.operation,
        }


class ErrorHandler:
    """
    Records alert pipeline failures for one service.

    Counts are kept for the life of the process; only the last
    ``HISTORY_LIMIT`` errors are kept in full.
    """

    def __init__(self, service_name: str, log_dir: Optional[str] = None):
        self.service_name = service_name
        self.log_dir = Path(log_dir or get_settings().ERROR_LOG_DIR)

        self.error_history: Deque[AlertError] = deque(maxlen=HISTORY_LIMIT)
        self.error_counts: Counter = Counter()
        self.last_seen: Dict[AlertErrorCode, str] = {}

        logger.info("Error handler initialized", service=service_name)

    def handle_error(
        self,
        error: Union[Exception, str],
        code: Optional[AlertErrorCode] = None,
        operation: str = "unknown_operation",
        context: Optional[Dict[str, Any]] = None
    ) -> AlertError:
        """
        Record a failure, log it and return the recorded error.

        Args:
            error: Exception or description of the failure
            code: Error code; inferred from the exception class when omitted
            operation: Name of the operation that failed
            context: Extra fields stored with the error (e.g. the ZIP code)
        """
        technical_details = None
        if isinstance(error, Exception):
            technical_details = "".join(
                traceback.format_exception(type(error), error, error.__traceback__)
            )

        recorded = AlertError(
            error_id=str(uuid.uuid4()),
            code=code or classify(error),
            message=str(error),
            service_name=self.service_name,
            operation=operation,
            timestamp=datetime.now().isoformat(),
            context=dict(context or {}),
            technical_details=technical_details,
        )

        self._log(recorded)
        self.error_history.append(recorded)
        self.error_counts[recorded.code] += 1
        self.last_seen[recorded.code] = recorded.timestamp
        return recorded

    def _log(self, error: AlertError):
        fields = error.log_fields()
        if error.severity == ErrorSeverity.CRITICAL:
            logger.critical("Alert pipeline failure", **fields, technical_details=error.technical_details)
        elif error.severity == ErrorSeverity.HIGH:
            logger.error("Alert pipeline failure", **fields, technical_details=error.technical_details)
        elif error.severity == ErrorSeverity.MEDIUM:
            logger.warning("Alert pipeline degraded", **fields)
        else:
            logger.info("Alert request rejected", **fields)

        if error.policy.persist:
            self._append_to_daily_log(error)

    def _append_to_daily_log(self, error: AlertError):
        entry = {
            "timestamp": error.timestamp,
            **error.log_fields(),
            "context": error.context,
            "technical_details": error.technical_details,
        }
        log_file = self.log_dir / f"errors_{datetime.now().strftime('%Y%m%d')}.json"
        try:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            with open(log_file, 'a', encoding='utf-8') as f:
                f.write(json.dumps(entry, default=str, ensure_ascii=False) + '\n')
        except OSError as e:
            logger.warning("Failed to write error log", path=str(log_file), error=str(e))

    def get_error_statistics(self) -> Dict[str, Any]:
        """Per-code counts for the life of the process plus the latest errors."""
        by_severity: Counter = Counter()
        for code, count in self.error_counts.items():
            by_severity[ERROR_POLICIES[code].severity.value] += count

        return {
            "service": self.service_name,
            "total_errors": sum(self.error_counts.values()),
            "by_code": {
                code.value: {"count": count, "last_occurrence": self.last_seen[code]}
                for code, count in self.error_counts.items()
            },
            "by_severity": dict(by_severity),
            "recent_errors": [
                {
                    "error_id": error.error_id,
                    "error_code": error.code.value,
                    "operation": error.operation,
                    "timestamp": error.timestamp,
                }
                for error in list(self.error_history)[-10:]
            ],
        }


# One handler per service name
_error_handlers: Dict[str, ErrorHandler] = {}


def get_error_handler(service_name: str) -> ErrorHandler:
    """Get or create error handler for a service."""
    if service_name not in _error_handlers:
        _error_handlers[service_name] = ErrorHandler(service_name)
    return _error_handlers[service_name]


def get_all_error_statistics() -> Dict[str, Any]:
    """Get error statistics for every registered service."""
    return {name: handler.get_error_statistics() for name, handler in _error_handlers.items()}
