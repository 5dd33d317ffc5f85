"""
Disaster Scenario Generator

Draws a hazard type, severity level and proximity for a location and
resolves them against the static hazard templates.
"""

import random
from datetime import datetime, timezone
from typing import Optional

import structlog

from models.schemas import LocationProfile, ScenarioRecord
from .hazard_templates import get_hazard_template

logger = structlog.get_logger(__name__)

# Cumulative thresholds for a single uniform draw in [0, 1)
EMERGENCY_THRESHOLD = 0.10
WARNING_THRESHOLD = 0.50

MIN_DISTANCE_MILES = 1
MAX_DISTANCE_MILES = 15


class ScenarioGenerator:
    """Generates random disaster scenarios from a location's risk profile."""

    @staticmethod
    def draw_severity(rng: random.Random) -> int:
        """Severity 5 with p=0.10, 4 with p=0.40, otherwise 3."""
        roll = rng.random()
        if roll < EMERGENCY_THRESHOLD:
            return 5
        if roll < WARNING_THRESHOLD:
            return 4
        return 3

    def generate(self, profile: LocationProfile, rng: Optional[random.Random] = None) -> ScenarioRecord:
        """
        Generate a disaster scenario for a location.

        The hazard type is drawn uniformly from the profile's historical
        risks, so a hazard listed twice is twice as likely. Each call uses
        its own random source unless one is injected.

        Args:
            profile: Location reference data
            rng: Optional random source (tests inject a seeded one)

        Returns:
            A new, immutable scenario record
        """
        rng = rng or random.Random()

        hazard_type = rng.choice(profile.historical_risks)
        severity = self.draw_severity(rng)
        template = get_hazard_template(hazard_type, severity)
        distance = rng.randint(MIN_DISTANCE_MILES, MAX_DISTANCE_MILES)

        scenario = ScenarioRecord(
            hazard_type=hazard_type,
            severity=severity,
            status=template.status,
            description=template.description,
            distance=distance,
            impact_time=template.impact_time,
            official_actions=template.official_actions,
            timestamp=datetime.now(timezone.utc),
        )

        logger.info(
            "Generated disaster scenario",
            neighborhood=profile.neighborhood,
            hazard_type=hazard_type,
            severity=severity,
            distance=distance,
        )
        return scenario
