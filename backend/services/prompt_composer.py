"""
Alert Prompt Composer

Serializes a disaster scenario and a location's demographics into a single
instruction document for the text-generation backend, ending with the JSON
contract the reply has to follow.
"""

from typing import Dict

from models.schemas import LocationProfile, ScenarioRecord

PRIMARY_LANGUAGE_MIN_PERCENT = 40
SECONDARY_LANGUAGE_MIN_PERCENT = 5
ELDERLY_THRESHOLD_PERCENT = 15
CHILDREN_THRESHOLD_PERCENT = 25
DISABLED_THRESHOLD_PERCENT = 12

READING_GRADE_BY_EDUCATION: Dict[str, str] = {
    "low": "6th grade reading level, short simple sentences, common everyday words only",
    "medium": "8th grade reading level, clear and complete sentences",
    "high": "10th grade reading level, technical terms allowed when explained in context",
}

SYSTEM_ROLE = (
    "You are an emergency alert system that writes personalized disaster "
    "warnings for the residents of one neighborhood."
)

INSTRUCTIONS = f"""## INSTRUCTIONS
Write one emergency alert for the residents described above. Follow every rule exactly.

1. **Languages**: The primary language is the language spoken by the highest share of residents if that share is above {PRIMARY_LANGUAGE_MIN_PERCENT}%, otherwise English. Secondary languages are the other languages spoken by more than {SECONDARY_LANGUAGE_MIN_PERCENT}% of residents, limited to 2-3.

2. **Reading level**: Match the education level:
   - low: {READING_GRADE_BY_EDUCATION["low"]}
   - medium: {READING_GRADE_BY_EDUCATION["medium"]}
   - high: {READING_GRADE_BY_EDUCATION["high"]}

3. **Urgency**: Choose an urgency level from 1 to 5 that matches the severity and the expected impact time.

4. **Headline**: At most 10 words with exactly one relevant emoji. It must name the disaster type and fit this location.

5. **Body**: 40-60 words. State the threat, the distance, the timeframe, and the single most critical action to take now. Use a direct tone for highly educated communities and a community-focused tone otherwise.

6. **Actions**: 3-5 imperative steps ("Do X", never "You should do X") for this disaster type and severity, adapted to the local geography, most critical first.

7. **Special considerations**: 2-4 specific, actionable notes for vulnerable residents:
   - elderly above {ELDERLY_THRESHOLD_PERCENT}%: mobility and medication guidance
   - children above {CHILDREN_THRESHOLD_PERCENT}%: child safety guidance
   - disabled above {DISABLED_THRESHOLD_PERCENT}%: accessibility guidance

8. **Translations**: Translate both the headline and the body completely into every secondary language, keeping them accurate and culturally appropriate."""

RESPONSE_SCHEMA = """## RESPONSE FORMAT
Reply with exactly one JSON object using these fields and types:

{
  "primaryLanguage": "string, language name",
  "secondaryLanguages": ["string, language name"],
  "readingLevel": "low | medium | high",
  "urgencyLevel": "integer 1-5",
  "headline": "string, at most 10 words with one emoji",
  "body": "string, 40-60 words",
  "actions": ["string, 3 to 5 items, most critical first"],
  "specialConsiderations": ["string, 2 to 4 items"],
  "translations": {
    "<secondary language name>": {
      "headline": "string",
      "body": "string"
    }
  }
}

Return ONLY the JSON object. Do not add explanations, markdown, or code fences."""


def format_percentages(shares: Dict[str, float]) -> str:
    """Format a name -> percent mapping as 'English: 65.2%, Spanish: 8.3%'."""
    return ", ".join(f"{name}: {percent}%" for name, percent in shares.items())


def format_income(amount: int) -> str:
    return f"${amount:,}"


class PromptComposer:
    """Builds the instruction document sent to the text-generation backend."""

    def compose(self, scenario: ScenarioRecord, profile: LocationProfile, location_code: str) -> str:
        """
        Compose the alert-generation prompt.

        Args:
            scenario: Generated disaster scenario
            profile: Demographics of the affected location
            location_code: ZIP code of the location

        Returns:
            Complete prompt text
        """
        sections = [
            SYSTEM_ROLE,
            self._disaster_section(scenario),
            self._community_section(profile, location_code),
            INSTRUCTIONS,
            RESPONSE_SCHEMA,
        ]
        return "\n\n".join(sections)

    @staticmethod
    def _disaster_section(scenario: ScenarioRecord) -> str:
        actions = "\n".join(
            f"  {i}. {action}" for i, action in enumerate(scenario.official_actions, start=1)
        )
        return (
            "## DISASTER INFORMATION\n"
            f"- Type: {scenario.hazard_type.value.upper()}\n"
            f"- Severity Level: {scenario.severity}/5 ({scenario.status.value.upper()})\n"
            f"- Description: {scenario.description}\n"
            f"- Distance from User: {scenario.distance} miles\n"
            f"- Expected Impact Time: {scenario.impact_time}\n"
            f"- Official Recommendations:\n{actions}"
        )

    @staticmethod
    def _community_section(profile: LocationProfile, location_code: str) -> str:
        vulnerable = format_percentages(profile.vulnerable_populations.model_dump())
        return (
            f"## COMMUNITY DEMOGRAPHICS (ZIP {location_code})\n"
            f"- Location: {profile.neighborhood}\n"
            f"- Languages Spoken: {format_percentages(profile.languages)}\n"
            f"- Median Age: {profile.median_age:g} years\n"
            f"- Median Income: {format_income(profile.median_income)}\n"
            f"- Education Level: {profile.education_level.value}\n"
            f"- Geography: {profile.geography}\n"
            f"- Vulnerable Populations: {vulnerable}"
        )
