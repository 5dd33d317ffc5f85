"""
Hazard Scenario Templates

Static narrative, expected impact time and official actions for every
supported hazard type at severity levels 3 (watch), 4 (warning) and
5 (emergency). The table is built once at import time and exposed
read-only.
"""

from types import MappingProxyType
from typing import Dict, Mapping, Tuple

from core.exceptions import ConfigurationError
from models.schemas import AlertStatus, HazardTemplate, HazardType

SEVERITY_LEVELS: Tuple[int, ...] = (3, 4, 5)

STATUS_BY_SEVERITY: Mapping[int, AlertStatus] = MappingProxyType({
    3: AlertStatus.WATCH,
    4: AlertStatus.WARNING,
    5: AlertStatus.EMERGENCY,
})


def _template(level: int, description: str, impact_time: str, actions: Tuple[str, ...]) -> HazardTemplate:
    return HazardTemplate(
        level=level,
        status=STATUS_BY_SEVERITY[level],
        description=description,
        impact_time=impact_time,
        official_actions=actions,
    )


class HazardTemplates:
    """Per-hazard template definitions keyed by severity level."""

    @staticmethod
    def definitions() -> Dict[HazardType, Dict[int, HazardTemplate]]:
        """Get template definitions for every hazard type."""
        return {
            HazardType.WILDFIRE: HazardTemplates.wildfire(),
            HazardType.FLOOD: HazardTemplates.flood(),
            HazardType.TSUNAMI: HazardTemplates.tsunami(),
            HazardType.EARTHQUAKE: HazardTemplates.earthquake(),
            HazardType.HURRICANE: HazardTemplates.hurricane(),
        }

    @staticmethod
    def wildfire() -> Dict[int, HazardTemplate]:
        return {
            3: _template(
                3,
                "Vegetation fire spreading in dry conditions with moderate winds. "
                "Fire crews actively engaged in containment efforts.",
                "4-6 hours",
                (
                    "Monitor local news and emergency alerts continuously",
                    "Prepare an evacuation kit with essentials (water, medications, documents)",
                    "Close all windows and doors to prevent smoke infiltration",
                    "Create defensible space around your property by clearing vegetation",
                    "Identify multiple evacuation routes from your neighborhood",
                ),
            ),
            4: _template(
                4,
                "Rapidly spreading wildfire with high winds and low humidity. Multiple "
                "structures threatened. Evacuation orders likely within hours.",
                "1-2 hours",
                (
                    "Evacuate immediately if in fire zone or upon official order",
                    "Turn off gas, propane, and pilot lights before leaving",
                    "Close all windows and doors, but leave them unlocked for firefighters",
                    "Move combustible materials away from your home exterior",
                    "Gather family members and pets, drive with headlights on through smoke",
                ),
            ),
            5: _template(
                5,
                "Explosive fire behavior with extreme winds creating firestorms. Immediate "
                "life-threatening situation. Multiple neighborhoods under mandatory evacuation.",
                "30-60 minutes",
                (
                    "EVACUATE NOW - Do not wait for additional warnings",
                    "Take only essential items and get out immediately",
                    "If trapped, go to a cleared area away from vegetation",
                    "Call 911 to report your location if unable to evacuate",
                    "Use wet cloth over nose and mouth, stay low to avoid smoke inhalation",
                ),
            ),
        }

    @staticmethod
    def flood() -> Dict[int, HazardTemplate]:
        return {
            3: _template(
                3,
                "Heavy rainfall causing rising water levels in rivers and streams. Flash "
                "flooding possible in low-lying areas and near waterways.",
                "3-5 hours",
                (
                    "Move valuable items and electronics to higher floors",
                    "Monitor weather updates and local water level reports",
                    "Avoid driving through standing water of unknown depth",
                    "Prepare sandbags for doorways if you live in flood-prone area",
                    "Know your evacuation route to higher ground",
                ),
            ),
            4: _template(
                4,
                "Major flooding in progress with rapidly rising water. Roads becoming "
                "impassable. Water entering structures in low-lying areas.",
                "1-2 hours",
                (
                    "Evacuate to higher ground immediately if ordered",
                    "Never walk or drive through floodwater (6 inches can knock you down)",
                    "Turn off utilities at main switches if water is approaching",
                    "Move to highest level of your building if unable to evacuate",
                    "Stay off bridges over fast-moving water",
                ),
            ),
            5: _template(
                5,
                "Catastrophic flooding with life-threatening water levels. Dam failure or "
                "levee breach imminent. Flash flooding sweeping away vehicles and structures.",
                "Immediate",
                (
                    "GET TO HIGH GROUND IMMEDIATELY - Life-threatening emergency",
                    "If trapped in building, go to highest floor, not attic (risk of entrapment)",
                    "Signal for help but stay where you are if water is too deep",
                    "Do not attempt to swim through flowing water",
                    "Call 911 and provide exact location if stranded",
                ),
            ),
        }

    @staticmethod
    def tsunami() -> Dict[int, HazardTemplate]:
        return {
            3: _template(
                3,
                "Distant earthquake has generated tsunami waves. Potential for dangerous "
                "currents and waves at beaches and harbors. No immediate threat to coastal residents.",
                "2-4 hours",
                (
                    "Stay informed through NOAA tsunami alerts and local authorities",
                    "Avoid beaches, harbors, and coastal areas below 100 feet elevation",
                    "Review tsunami evacuation routes in your area",
                    "Prepare evacuation supplies in case watch is upgraded",
                    "Do not go to the shore to observe waves - tsunamis can arrive suddenly",
                ),
            ),
            4: _template(
                4,
                "Tsunami waves confirmed and approaching coastline. Dangerous wave action "
                "and strong currents expected. Coastal flooding possible for several hours.",
                "30-90 minutes",
                (
                    "Evacuate immediately to high ground at least 100 feet above sea level",
                    "Move at least 2 miles inland if no high ground is available",
                    "Leave immediately - do not wait to gather belongings",
                    "Go on foot if traffic is congested - do not stay in car",
                    "Stay away from coast for several hours - multiple waves will arrive",
                ),
            ),
            5: _template(
                5,
                "Major tsunami waves arriving imminently. Waves over 10 feet confirmed. "
                "Catastrophic inundation expected along entire coastline. Immediate "
                "life-threatening danger.",
                "15-30 minutes",
                (
                    "EVACUATE TO HIGH GROUND NOW - Run, do not walk",
                    "If unable to escape, climb to upper floors or roof of sturdy building",
                    "Climb trees or grab floating debris only as absolute last resort",
                    "Do not return until ALL-CLEAR issued - waves continue for hours",
                    "If swept up in wave, protect head and try to stay afloat",
                ),
            ),
        }

    @staticmethod
    def earthquake() -> Dict[int, HazardTemplate]:
        return {
            3: _template(
                3,
                "Moderate earthquake (5.5-6.0 magnitude) has occurred. Aftershocks "
                "expected. Minor structural damage possible. No immediate widespread danger.",
                "Ongoing",
                (
                    "Check yourself and others for injuries, provide first aid if trained",
                    "Inspect home for structural damage, gas leaks, and electrical issues",
                    "Prepare for aftershocks - expect strong shaking to recur",
                    "Turn off gas if you smell it or suspect a leak",
                    "Stay out of damaged buildings until inspected by professionals",
                ),
            ),
            4: _template(
                4,
                "Strong earthquake (6.0-6.9 magnitude) with significant shaking. "
                "Structural damage occurring. Gas leaks and fires reported. Major "
                "aftershocks likely.",
                "Ongoing",
                (
                    "If indoors, DROP, COVER, and HOLD ON during aftershocks",
                    "Evacuate damaged buildings immediately - use stairs, not elevators",
                    "Stay away from windows, heavy furniture, and unsecured objects",
                    "If trapped in debris, do not light matches - tap on pipes to signal location",
                    "Avoid coastal areas - earthquake may generate tsunami",
                ),
            ),
            5: _template(
                5,
                "Major earthquake (7.0+ magnitude) causing catastrophic damage. Widespread "
                "structural failures. Mass casualties reported. Infrastructure severely compromised.",
                "Ongoing",
                (
                    "Protect yourself from falling debris - stay in safe location if possible",
                    "If trapped, remain calm, cover mouth with cloth, tap rhythmically for rescue",
                    "Do not enter damaged structures - risk of collapse in aftershocks",
                    "Avoid all bridges, overpasses, and elevated roadways",
                    "Conserve phone battery - send texts instead of calls, only call 911 for emergencies",
                ),
            ),
        }

    @staticmethod
    def hurricane() -> Dict[int, HazardTemplate]:
        return {
            3: _template(
                3,
                "Category 2 hurricane approaching (96-110 mph winds). Storm surge 6-8 feet "
                "possible. Extensive damage expected to roofs, trees, and power lines.",
                "12-24 hours",
                (
                    "Complete all preparations - board windows, secure outdoor items",
                    "Stock up on food, water (1 gallon per person per day for 7 days)",
                    "Fill vehicles with gas, charge all electronic devices",
                    "Review evacuation plan with family members",
                    "Prepare to evacuate if ordered by authorities",
                ),
            ),
            4: _template(
                4,
                "Category 3-4 hurricane imminent (111-155 mph winds). Storm surge 9-18 feet. "
                "Catastrophic damage expected. Area may be uninhabitable for weeks or months.",
                "6-12 hours",
                (
                    "Evacuate NOW if in storm surge zone or mobile home",
                    "If unable to evacuate, move to interior room away from windows",
                    "Turn off utilities if flooding expected",
                    "Take refuge in designated shelter if home is not safe",
                    "Stay indoors during entire storm - eye of hurricane is deceptive",
                ),
            ),
            5: _template(
                5,
                "Category 4-5 hurricane with catastrophic winds (155+ mph) and storm surge "
                "over 18 feet. Complete destruction of frame homes expected. Area will be "
                "uninhabitable for months.",
                "3-6 hours",
                (
                    "FINAL CHANCE TO EVACUATE - Leave immediately if possible",
                    "If unable to leave, take shelter in small interior room, closet, or hallway",
                    "Get under sturdy furniture, protect head and body from debris",
                    "Stay away from windows - lie on floor if breaking occurs",
                    "Do not leave shelter until authorities declare all-clear (12+ hours)",
                ),
            ),
        }


_HAZARD_TEMPLATES: Mapping[HazardType, Mapping[int, HazardTemplate]] = MappingProxyType({
    hazard: MappingProxyType(levels)
    for hazard, levels in HazardTemplates.definitions().items()
})


def get_hazard_templates() -> Mapping[HazardType, Mapping[int, HazardTemplate]]:
    """Get the read-only hazard template table."""
    return _HAZARD_TEMPLATES


def has_hazard_template(hazard_type: str, severity: int) -> bool:
    """Check whether a template exists for (hazard_type, severity)."""
    try:
        hazard = HazardType(hazard_type)
    except ValueError:
        return False
    return severity in _HAZARD_TEMPLATES.get(hazard, {})


def get_hazard_template(hazard_type: str, severity: int) -> HazardTemplate:
    """
    Look up the template for a hazard type at a severity level.

    Raises:
        ConfigurationError: if no template is defined. This is a reference
            data defect and is not meant to be recovered from per request.
    """
    if not has_hazard_template(hazard_type, severity):
        raise ConfigurationError(
            f"No hazard template for type={hazard_type!r} severity={severity}"
        )
    return _HAZARD_TEMPLATES[HazardType(hazard_type)][severity]
