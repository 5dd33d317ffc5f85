"""
Alert Service

End-to-end alert building for a ZIP code: location lookup, scenario
generation, prompt composition, text generation and language overrides.
"""

from typing import Optional

import structlog

from core.exceptions import LocationNotFoundError
from models.schemas import AlertResponse, LocationSummary, ScenarioSummary
from scenarios.generator import ScenarioGenerator
from services.alert_generator import AlertGenerationClient
from services.localizer import ResponseLocalizer
from services.location_service import LocationRepository, get_location_repository
from services.prompt_composer import PromptComposer

logger = structlog.get_logger(__name__)


class AlertService:
    """Builds personalized disaster alerts. Holds no per-request state."""

    def __init__(
        self,
        locations: Optional[LocationRepository] = None,
        generator: Optional[ScenarioGenerator] = None,
        composer: Optional[PromptComposer] = None,
        client: Optional[AlertGenerationClient] = None,
        localizer: Optional[ResponseLocalizer] = None
    ):
        self.locations = locations if locations is not None else get_location_repository()
        self.generator = generator or ScenarioGenerator()
        self.composer = composer or PromptComposer()
        self.client = client or AlertGenerationClient()
        self.localizer = localizer or ResponseLocalizer()

    async def build_alert(self, zip_code: str) -> AlertResponse:
        """
        Build a personalized alert for a ZIP code.

        Raises:
            LocationNotFoundError: if the ZIP code is unknown. No scenario is
                generated in that case.
        """
        profile = self.locations.get(zip_code)
        if profile is None:
            raise LocationNotFoundError(zip_code, self.locations.list_codes())

        log = logger.bind(zip_code=zip_code)
        log.info("Generating disaster scenario")
        scenario = self.generator.generate(profile)

        prompt = self.composer.compose(scenario, profile, zip_code)
        alert = await self.client.invoke(
            prompt,
            metadata={
                "task": "alert_generation",
                "zip_code": zip_code,
                "hazard_type": scenario.hazard_type.value,
                "severity": scenario.severity,
            },
        )
        alert = self.localizer.localize(alert, zip_code)

        log.info(
            "Successfully generated alert",
            hazard_type=scenario.hazard_type.value,
            severity=scenario.severity,
        )
        return AlertResponse(
            scenario=ScenarioSummary.from_scenario(scenario),
            alert=alert,
            location=LocationSummary(code=zip_code, neighborhood=profile.neighborhood),
        )


_alert_service = None


def get_alert_service() -> AlertService:
    """Get the global alert service instance."""
    global _alert_service
    if _alert_service is None:
        _alert_service = AlertService()
    return _alert_service
