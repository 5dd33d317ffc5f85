"""
Location Reference Service

Read-only lookup of ZIP code demographic and risk profiles loaded from
the YAML reference table. The table is validated against the hazard
templates when it is loaded, so a broken profile stops the application
at start-up instead of failing individual requests.
"""

from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Union

import structlog
import yaml
from pydantic import ValidationError

from core.config import get_settings
from core.exceptions import ConfigurationError
from models.schemas import LocationProfile, LocationSummary
from scenarios.hazard_templates import SEVERITY_LEVELS, has_hazard_template

logger = structlog.get_logger(__name__)


class LocationRepository:
    """Static ZIP code -> LocationProfile lookup."""

    def __init__(self, profiles: Mapping[str, LocationProfile]):
        self.validate_profiles(profiles)
        self._profiles: Mapping[str, LocationProfile] = MappingProxyType(dict(profiles))

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "LocationRepository":
        """
        Load and validate location profiles from a YAML file.

        Raises:
            ConfigurationError: if the file is missing, malformed, or any
                profile fails validation.
        """
        path = Path(path)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                raw = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Cannot read location data {path}: {e}") from e

        if not isinstance(raw, dict) or not raw:
            raise ConfigurationError(f"Location data {path} must be a non-empty mapping")

        profiles: Dict[str, LocationProfile] = {}
        for zip_code, data in raw.items():
            try:
                profiles[str(zip_code)] = LocationProfile.model_validate(data)
            except ValidationError as e:
                raise ConfigurationError(f"Invalid profile for ZIP {zip_code}: {e}") from e

        repository = cls(profiles)
        logger.info("Location reference data loaded", path=str(path), locations=len(profiles))
        return repository

    @staticmethod
    def validate_profiles(profiles: Mapping[str, LocationProfile]) -> None:
        """Every historical risk must have a template at every severity level."""
        problems = []
        for zip_code, profile in profiles.items():
            for hazard_type in profile.historical_risks:
                missing = [level for level in SEVERITY_LEVELS if not has_hazard_template(hazard_type, level)]
                if missing:
                    problems.append(f"{zip_code}: {hazard_type} (severity {missing})")

        if problems:
            raise ConfigurationError(
                "Historical risks without hazard templates: " + "; ".join(problems)
            )

    def get(self, zip_code: str) -> Optional[LocationProfile]:
        """Get the profile for a ZIP code, or None if unknown."""
        return self._profiles.get(zip_code)

    def list_codes(self) -> List[str]:
        """Get all known ZIP codes, sorted."""
        return sorted(self._profiles)

    def list_locations(self) -> List[LocationSummary]:
        """Get code and neighborhood for every known ZIP code."""
        return [
            LocationSummary(code=code, neighborhood=self._profiles[code].neighborhood)
            for code in self.list_codes()
        ]

    def __contains__(self, zip_code: str) -> bool:
        return zip_code in self._profiles

    def __len__(self) -> int:
        return len(self._profiles)


@lru_cache()
def get_location_repository() -> LocationRepository:
    """Get the location repository loaded from the configured YAML file."""
    return LocationRepository.from_yaml(get_settings().LOCATIONS_CONFIG_PATH)
