"""
Pydantic schemas for the Personalized Disaster Alert API.

These schemas define the data structures that flow through the alert
pipeline: static hazard templates, location reference data, generated
scenarios, and the alert payload returned to clients.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator

LANGUAGE_TOTAL_TOLERANCE = 5.0


class HazardType(str, Enum):
    """Hazard type enumeration."""
    WILDFIRE = "wildfire"
    FLOOD = "flood"
    TSUNAMI = "tsunami"
    EARTHQUAKE = "earthquake"
    HURRICANE = "hurricane"


class AlertStatus(str, Enum):
    """Alert status derived from severity."""
    WATCH = "watch"
    WARNING = "warning"
    EMERGENCY = "emergency"


class EducationLevel(str, Enum):
    """Education level enumeration, also used as reading level."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# ===== Hazard & Scenario Models =====

class HazardTemplate(BaseModel):
    """Static narrative and official actions for one hazard at one severity."""
    model_config = ConfigDict(frozen=True)

    level: int = Field(ge=3, le=5)
    status: AlertStatus
    description: str = Field(min_length=1)
    impact_time: str = Field(min_length=1)
    official_actions: Tuple[str, ...] = Field(min_length=5, max_length=5)

    @field_validator('official_actions')
    @classmethod
    def actions_not_blank(cls, v):
        if any(not action.strip() for action in v):
            raise ValueError('Official actions must be non-empty strings')
        return v


class ScenarioRecord(BaseModel):
    """A generated disaster scenario for a single request."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    hazard_type: HazardType = Field(alias="type")
    severity: int = Field(ge=3, le=5)
    status: AlertStatus
    description: str
    distance: int = Field(ge=1, le=15)
    impact_time: str = Field(alias="impactTime")
    official_actions: Tuple[str, ...] = Field(alias="officialActions", min_length=5, max_length=5)
    timestamp: datetime


class ScenarioSummary(BaseModel):
    """Scenario fields returned to API clients."""
    model_config = ConfigDict(populate_by_name=True)

    hazard_type: HazardType = Field(alias="type")
    severity: int
    status: AlertStatus
    distance: int
    impact_time: str = Field(alias="impactTime")
    timestamp: datetime

    @classmethod
    def from_scenario(cls, scenario: ScenarioRecord) -> "ScenarioSummary":
        return cls(
            hazard_type=scenario.hazard_type,
            severity=scenario.severity,
            status=scenario.status,
            distance=scenario.distance,
            impact_time=scenario.impact_time,
            timestamp=scenario.timestamp,
        )


# ===== Location Models =====

class Coordinates(BaseModel):
    """Geographic centroid of a ZIP code."""
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


class VulnerablePopulations(BaseModel):
    """Percentages of vulnerable groups within a ZIP code."""
    elderly: float = Field(ge=0, le=100)
    children: float = Field(ge=0, le=100)
    disabled: float = Field(ge=0, le=100)


class LocationProfile(BaseModel):
    """Demographic and risk reference data for one ZIP code."""
    neighborhood: str
    languages: Dict[str, float] = Field(min_length=1)
    median_age: float = Field(gt=0)
    median_income: int = Field(ge=0)
    education_level: EducationLevel
    geography: str
    coordinates: Optional[Coordinates] = None
    vulnerable_populations: VulnerablePopulations
    historical_risks: List[str] = Field(min_length=1)

    @field_validator('languages')
    @classmethod
    def languages_sum_to_hundred(cls, v):
        """Language shares must add up to roughly 100%."""
        total = sum(v.values())
        if abs(total - 100.0) > LANGUAGE_TOTAL_TOLERANCE:
            raise ValueError(f'Language percentages must sum to ~100, got {total:.1f}')
        return v


class LocationSummary(BaseModel):
    """Location fields returned to API clients."""
    code: str
    neighborhood: str


# ===== Alert Models =====

class Translation(BaseModel):
    """Translated headline and body for one language."""
    headline: str
    body: str


class AlertPayload(BaseModel):
    """Personalized alert content produced by the text-generation backend."""
    model_config = ConfigDict(populate_by_name=True)

    primary_language: str = Field(alias="primaryLanguage", min_length=1)
    secondary_languages: List[str] = Field(alias="secondaryLanguages", default_factory=list)
    reading_level: EducationLevel = Field(alias="readingLevel")
    urgency_level: int = Field(alias="urgencyLevel", ge=1, le=5)
    headline: str = Field(min_length=1)
    body: str = Field(min_length=1)
    actions: List[str] = Field(min_length=3, max_length=5)
    special_considerations: List[str] = Field(
        alias="specialConsiderations", min_length=2, max_length=4
    )
    translations: Dict[str, Translation] = Field(default_factory=dict)


class AlertResponse(BaseModel):
    """End-to-end result of building an alert for a ZIP code."""
    scenario: ScenarioSummary
    alert: AlertPayload
    location: LocationSummary


class AlertRequest(BaseModel):
    """Request body for alert generation."""
    model_config = ConfigDict(populate_by_name=True)

    zip_code: Optional[str] = Field(default=None, alias="zipCode")

    @field_validator("zip_code", mode="before")
    @classmethod
    def coerce_zip_code(cls, value):
        """Numeric ZIP codes are read as their digits; other non-strings count as missing."""
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value if isinstance(value, str) else None
