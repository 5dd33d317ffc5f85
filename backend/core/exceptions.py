"""
Exception types shared across the alert pipeline.
"""

from typing import List, Optional


class ConfigurationError(Exception):
    """Reference data or template tables are inconsistent. Fatal at start-up."""


class LocationNotFoundError(LookupError):
    """The requested ZIP code is not in the location reference table."""

    def __init__(self, zip_code: str, available_codes: Optional[List[str]] = None):
        self.zip_code = zip_code
        self.available_codes = sorted(available_codes or [])
        super().__init__(f"ZIP code not found: {zip_code}")


class LLMServiceError(Exception):
    """The text-generation backend failed to produce a reply."""


class LLMUnavailableError(LLMServiceError):
    """No text-generation backend is configured."""
