"""
Scenario Module

Hazard templates and random disaster scenario generation.
"""

from .generator import ScenarioGenerator
from .hazard_templates import get_hazard_template, get_hazard_templates

__version__ = "0.1.0"
__all__ = ["ScenarioGenerator", "get_hazard_template", "get_hazard_templates"]
