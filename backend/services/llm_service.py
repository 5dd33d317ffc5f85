"""
Shared LLM Service

Provides a centralized service for making LLM calls using DSPy.
Includes logging of every call (prompt, reply, timing, errors) to local
JSONL files for audit and analysis.
"""

import asyncio
import json
import time
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

import dspy
import structlog

from core.config import Settings, get_settings
from core.exceptions import LLMServiceError, LLMUnavailableError

logger = structlog.get_logger(__name__)

DEFAULT_MODELS = {
    "GEMINI_API_KEY": "gemini/gemini-1.5-flash",
    "ANTHROPIC_API_KEY": "anthropic/claude-sonnet-4-20250514",
    "OPENAI_API_KEY": "openai/gpt-4o-mini",
}


class LLMLogger:
    """Logger for all LLM API calls."""

    def __init__(self, log_dir: str = "local_s3/llm_logs"):
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"LLM Logger initialized, logging to: {self.log_dir}")

    @property
    def current_log_file(self) -> Path:
        return self.log_dir / f"llm_calls_{datetime.now(timezone.utc).strftime('%Y%m%d')}.jsonl"

    def log_call(
        self,
        call_id: str,
        model: str,
        prompt: str,
        response: str,
        duration_ms: float,
        tokens_used: Optional[int] = None,
        error: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ):
        """Log an LLM API call to local storage."""
        log_entry = {
            "call_id": call_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "model": model,
            "prompt": prompt,
            "response": response,
            "duration_ms": duration_ms,
            "tokens_used": tokens_used,
            "error": error,
            "metadata": metadata or {}
        }

        try:
            # One JSON object per line
            with open(self.current_log_file, 'a', encoding='utf-8') as f:
                f.write(json.dumps(log_entry, ensure_ascii=False) + '\n')

            logger.info(
                "LLM API call completed",
                call_id=call_id,
                model=model,
                duration_ms=duration_ms,
                tokens_used=tokens_used,
                prompt_length=len(prompt),
                response_length=len(response),
                error=error
            )
        except OSError as e:
            logger.error(f"Failed to log LLM call: {e}", exc_info=True)

    def get_logs_for_date(self, date: Optional[str] = None) -> list:
        """Retrieve logs for a specific date (YYYYMMDD format)."""
        if date is None:
            date = datetime.now(timezone.utc).strftime('%Y%m%d')

        log_file = self.log_dir / f"llm_calls_{date}.jsonl"
        if not log_file.exists():
            return []

        logs = []
        try:
            with open(log_file, 'r', encoding='utf-8') as f:
                for line in f:
                    if line.strip():
                        logs.append(json.loads(line))
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read logs: {e}")

        return logs

    def get_stats(self, date: Optional[str] = None) -> Dict[str, Any]:
        """Get statistics for LLM calls on a specific date."""
        logs = self.get_logs_for_date(date)

        if not logs:
            return {
                "total_calls": 0,
                "total_duration_ms": 0,
                "total_tokens": 0,
                "errors": 0
            }

        total_duration = sum(log['duration_ms'] for log in logs)
        total_tokens = sum(log.get('tokens_used', 0) for log in logs if log.get('tokens_used'))
        errors = sum(1 for log in logs if log.get('error'))

        return {
            "total_calls": len(logs),
            "total_duration_ms": total_duration,
            "avg_duration_ms": total_duration / len(logs),
            "total_tokens": total_tokens,
            "avg_tokens": total_tokens / len(logs) if total_tokens else 0,
            "errors": errors,
            "success_rate": (len(logs) - errors) / len(logs) * 100
        }


class LLMService:
    """Centralized service for LLM operations using DSPy with call logging."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.lm = None
        self.model_name = None
        self.llm_logger = LLMLogger(self.settings.LLM_LOG_DIR)
        self._initialize_dspy()

    def _resolve_model(self) -> Optional[tuple]:
        """Pick (model, api_key) from the first configured provider key."""
        for key_name, default_model in DEFAULT_MODELS.items():
            api_key = getattr(self.settings, key_name)
            if api_key:
                return self.settings.LLM_MODEL or default_model, api_key
        return None

    def _initialize_dspy(self):
        """Initialize the DSPy language model from settings."""
        resolved = self._resolve_model()
        if resolved is None:
            logger.warning("No LLM API key found in settings, alerts will use the fallback payload")
            return

        model_name, api_key = resolved
        try:
            logger.info("Initializing DSPy LLM Service", model=model_name)
            self.lm = dspy.LM(
                model=model_name,
                api_key=api_key,
                temperature=self.settings.LLM_TEMPERATURE,
                max_tokens=self.settings.LLM_MAX_TOKENS,
                cache=False
            )
            self.model_name = model_name
            logger.info("DSPy LLM Service ready", model=model_name)
        except Exception as e:
            logger.error(f"Failed to initialize DSPy LLM Service: {e}", exc_info=True)
            self.lm = None

    def is_available(self) -> bool:
        """Check if LLM service is available and configured."""
        return self.lm is not None

    @staticmethod
    def _extract_text(response: Any) -> str:
        """Extract reply text from the different DSPy/LiteLLM response shapes."""
        if hasattr(response, 'choices'):
            text = response.choices[0].message.content
        elif isinstance(response, list):
            text = response[0] if response else ""
        else:
            text = response

        if isinstance(text, dict):
            text = text.get("text", "")
        return "" if text is None else str(text)

    async def generate_text(
        self,
        prompt: str,
        max_tokens: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> str:
        """
        Generate text using the configured LLM with call logging.

        The blocking provider call runs in a worker thread.

        Args:
            prompt: Input prompt
            max_tokens: Maximum tokens to generate, defaults to LLM_MAX_TOKENS
            metadata: Optional metadata to include in logs (e.g., zip_code, task)

        Returns:
            Generated text

        Raises:
            LLMUnavailableError: if no provider is configured
            LLMServiceError: if the provider call fails
        """
        call_id = str(uuid.uuid4())
        start_time = time.time()
        response_text = ""
        error = None
        tokens_used = None

        try:
            if not self.is_available():
                error = "LLM not available"
                raise LLMUnavailableError(error)

            response = await asyncio.to_thread(
                self.lm,
                prompt,
                max_tokens=max_tokens or self.settings.LLM_MAX_TOKENS,
                temperature=self.settings.LLM_TEMPERATURE
            )
            response_text = self._extract_text(response)

            if hasattr(response, 'usage'):
                tokens_used = response.usage.total_tokens

            return response_text

        except LLMServiceError:
            raise
        except Exception as e:
            error = str(e)
            logger.error(f"LLM generation failed: {e}")
            raise LLMServiceError(error) from e

        finally:
            # Log the call regardless of success/failure
            duration_ms = (time.time() - start_time) * 1000
            self.llm_logger.log_call(
                call_id=call_id,
                model=self.model_name or "unknown",
                prompt=prompt,
                response=response_text,
                duration_ms=duration_ms,
                tokens_used=tokens_used,
                error=error,
                metadata=metadata
            )

    def get_logs(self, date: Optional[str] = None) -> list:
        """
        Retrieve LLM call logs for a specific date.

        Args:
            date: Date in YYYYMMDD format, defaults to today

        Returns:
            List of log entries
        """
        return self.llm_logger.get_logs_for_date(date)

    def get_stats(self, date: Optional[str] = None) -> Dict[str, Any]:
        """Get statistics for LLM calls on a date (YYYYMMDD, defaults to today)."""
        return self.llm_logger.get_stats(date)


# Global instance
_llm_service = None


def get_llm_service() -> LLMService:
    """Get the global LLM service instance."""
    global _llm_service
    if _llm_service is None:
        _llm_service = LLMService()
    return _llm_service
