"""
Unit tests for the response localizer.
"""

import pytest

from models.schemas import AlertPayload, Translation
from services.alert_generator import get_fallback_alert
from services.localizer import LANGUAGE_OVERRIDES, LanguageOverride, ResponseLocalizer


@pytest.fixture
def payload(valid_alert_data) -> AlertPayload:
    return AlertPayload.model_validate(valid_alert_data)


class TestResponseLocalizer:
    """Test ResponseLocalizer.localize."""

    def setup_method(self):
        self.localizer = ResponseLocalizer()

    def test_override_table(self):
        assert [(o.location_code, o.language) for o in LANGUAGE_OVERRIDES] == [
            ("90024", "Persian"),
            ("90022", "Spanish"),
        ]

    def test_persian_override_keeps_generated_translation(self, payload):
        result = self.localizer.localize(payload, "90024")

        assert result.secondary_languages == ["Persian"]
        assert list(result.translations) == ["Persian"]
        assert result.translations["Persian"] == payload.translations["Persian"]

    def test_spanish_override_drops_other_translations(self, payload):
        result = self.localizer.localize(payload, "90022")

        assert result.secondary_languages == ["Spanish"]
        assert list(result.translations) == ["Spanish"]
        assert result.translations["Spanish"].headline == "Alerta de incendio"

    def test_missing_translation_uses_top_level_text(self):
        fallback = get_fallback_alert()

        result = self.localizer.localize(fallback, "90024")

        assert result.secondary_languages == ["Persian"]
        assert result.translations == {
            "Persian": Translation(headline=fallback.headline, body=fallback.body)
        }

    def test_other_fields_unchanged(self, payload):
        result = self.localizer.localize(payload, "90022")

        assert result.primary_language == payload.primary_language
        assert result.headline == payload.headline
        assert result.body == payload.body
        assert result.actions == payload.actions
        assert result.special_considerations == payload.special_considerations
        assert result.urgency_level == payload.urgency_level

    def test_input_payload_not_modified(self, payload):
        self.localizer.localize(payload, "90024")

        assert payload.secondary_languages == ["Persian", "Spanish"]
        assert set(payload.translations) == {"Persian", "Spanish"}

    @pytest.mark.parametrize("code", ["90210", "10001", "00000", ""])
    def test_no_override_is_identity(self, payload, code):
        assert self.localizer.localize(payload, code) is payload

    def test_first_matching_override_wins(self, payload):
        localizer = ResponseLocalizer(overrides=(
            LanguageOverride(location_code="90210", language="Persian"),
            LanguageOverride(location_code="90210", language="Spanish"),
        ))

        result = localizer.localize(payload, "90210")

        assert result.secondary_languages == ["Persian"]

    def test_serializes_with_wire_names(self, payload):
        data = self.localizer.localize(payload, "90024").model_dump(by_alias=True)

        assert data["secondaryLanguages"] == ["Persian"]
        assert list(data["translations"]) == ["Persian"]
