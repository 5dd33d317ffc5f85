"""
Response Localizer

Applies fixed, ZIP-code-keyed language overrides to a generated alert. For
locations where the correct translation language is known with high
confidence, the generated language set is replaced by that single language.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

import structlog

from models.schemas import AlertPayload, Translation

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class LanguageOverride:
    """Force a single secondary language for one ZIP code."""
    location_code: str
    language: str


# Checked in order; the first matching entry wins.
LANGUAGE_OVERRIDES: Tuple[LanguageOverride, ...] = (
    LanguageOverride(location_code="90024", language="Persian"),  # Westwood
    LanguageOverride(location_code="90022", language="Spanish"),  # East Los Angeles
)


class ResponseLocalizer:
    """Applies language overrides after generation."""

    def __init__(self, overrides: Tuple[LanguageOverride, ...] = LANGUAGE_OVERRIDES):
        self.overrides = overrides

    def find_override(self, location_code: str) -> Optional[LanguageOverride]:
        return next((o for o in self.overrides if o.location_code == location_code), None)

    def localize(self, payload: AlertPayload, location_code: str) -> AlertPayload:
        """
        Apply the override for a ZIP code, if there is one.

        The overridden copy keeps only the forced language's translation. When
        the generated alert has no translation for it, the top-level headline
        and body are used instead. Without an override the payload is returned
        unchanged.
        """
        override = self.find_override(location_code)
        if override is None:
            return payload

        translation = payload.translations.get(override.language) or Translation(
            headline=payload.headline,
            body=payload.body,
        )

        logger.info(
            "Applied language override",
            zip_code=location_code,
            language=override.language,
            generated_translation=override.language in payload.translations,
        )
        return payload.model_copy(update={
            "secondary_languages": [override.language],
            "translations": {override.language: translation},
        })
