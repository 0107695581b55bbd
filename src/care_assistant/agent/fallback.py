"""Deterministic rule-based provider used when the remote model is unavailable."""

from __future__ import annotations

import logging
import re
from typing import Any

from care_assistant.config import RuleBasedConfig
from care_assistant.data.contract import DataQueryContract
from care_assistant.types import Answer, AnswerSource, ProviderHealth, Query

logger = logging.getLogger(__name__)

_APOLOGY = (
    "I apologize, but I'm having trouble processing your request right now. "
    "Please try again later."
)

_FACILITY_TYPE_KEYWORDS = (
    ("hospital", "HOSPITAL"),
    ("clinic", "CLINIC"),
    ("lab", "LAB"),
    ("pharmacy", "PHARMACY"),
)

_SEARCH_MARKERS = ("named", "search for")

_HELP_TEXT = """\
**Healthcare Management Assistant**

I can help you with:

**Patient Information:**
- "Show sample patient profiles"
- "Search for patients named Smith"
- "Patient statistics"

**Facility Information:**
- "List hospitals/clinics"
- "Facility analysis"
- "Patient distribution"

**System Information:**
- "System statistics"
- "Patient counts"
- "Facility overview"

**Example Queries:**
- "List sample patient profiles"
- "Analyze patient distribution by facility type"
- "How many facilities are there?"
- "Show me all hospitals\""""

_GENERAL_TEXT = """\
I'm your healthcare management assistant. I can help you query:
- Patient records and profiles
- Healthcare facilities
- System statistics and analysis

Try asking about:
- "Sample patient profiles"
- "Healthcare facilities"
- "System statistics"
- Or type "help" for more options"""

_ANALYSIS_TEXT = """\
**Analysis Capabilities**

I can help analyze:
- Patient distribution across facilities
- Facility capacity and utilization
- System-wide healthcare metrics

Try these analysis queries:
- "Analyze patient distribution by facility type"
- "Facility capacity analysis"
- "Patient load distribution\""""


class RuleBasedProvider:
    """Answers from keyword rules and direct data queries, without any LLM.

    Rules are checked in order and the first match wins, so a query such as
    "sample hospital patients" is treated as a sample request, not a facility
    listing. This provider is always enabled and always healthy.
    """

    name = "Rule-Based Service"

    def __init__(
        self,
        data: DataQueryContract,
        *,
        config: RuleBasedConfig | None = None,
    ) -> None:
        self.data = data
        self.config = config or RuleBasedConfig()

    def is_enabled(self) -> bool:
        return True

    def get_health(self) -> ProviderHealth:
        return ProviderHealth.HEALTHY

    def process_query(self, query: Query) -> Answer:
        try:
            text = query.text.strip()
            lowered = text.lower()
            logger.info("Processing query with rule-based provider: %s", lowered)

            if _contains_any(lowered, "sample", "example", "show me patient"):
                return self._sample_patients()
            if _contains_any(lowered, "analyze", "distribution", "analysis"):
                return self._analysis(lowered)
            if _contains_any(lowered, "facility", "hospital", "clinic"):
                return self._facilities(lowered)
            if _contains_any(lowered, "stat", "count", "how many"):
                return self._statistics()
            if "search" in lowered and "patient" in lowered:
                return self._patient_search(text)
            if "help" in lowered:
                return self._reply(_HELP_TEXT)
            return self._reply(_GENERAL_TEXT)
        except Exception:
            logger.exception("Rule-based provider failed")
            return Answer.failure(_APOLOGY, metadata={"provider": self.name})

    def _reply(
        self, text: str, data: Any = None, **metadata: Any
    ) -> Answer:
        return Answer.success(
            text,
            AnswerSource.RULE_BASED,
            data=data,
            metadata={"provider": self.name, **metadata},
        )

    def _sample_patients(self) -> Answer:
        patients = self.data.get_sample_patients(self.config.sample_count)
        if not patients:
            return self._reply(
                "I don't have any sample patient profiles available at the moment. "
                "You can add patients using the POST /api/patients endpoint.",
                intent="sample_patients",
            )

        answer = (
            f"Here are {len(patients)} sample patient profiles from our system:\n\n"
            "For more detailed patient information, you can use:\n"
            "- GET /api/patients - List all patients\n"
            "- GET /api/patients/{id} - Get specific patient details\n"
            "- POST /api/patients - Register new patient"
        )
        return self._reply(answer, patients, intent="sample_patients")

    def _analysis(self, lowered: str) -> Answer:
        if "patient distribution" not in lowered and "facility type" not in lowered:
            return self._reply(_ANALYSIS_TEXT, intent="analysis")

        stats = self.data.get_system_stats()
        lines = [
            "**Patient Distribution Analysis**",
            "",
            f"- Total Patients: {stats['totalPatients']}",
            f"- Total Facilities: {stats['totalFacilities']}",
            f"- Average Patients per Facility: {stats['averagePatientsPerFacility']:.1f}",
            "",
            "**Facilities by Type:**",
        ]
        for facility_type, count in stats["facilitiesByType"].items():
            lines.append(f"- {facility_type}: {count} facilities")
        lines += [
            "",
            "**Available Analysis Endpoints:**",
            "- GET /api/facilities - Facility details",
            "- GET /api/patients - Patient listings",
            "- GET /api/facilities/{id}/patients - Patients by facility",
        ]
        return self._reply("\n".join(lines), stats, intent="distribution")

    def _facilities(self, lowered: str) -> Answer:
        facility_type = _extract_facility_type(lowered)
        facilities = self.data.get_facilities(facility_type, self.config.facility_limit)

        type_text = f"{facility_type.lower()} " if facility_type else ""
        answer = (
            f"Here are the {type_text}facilities in our system:\n\n"
            "Use these endpoints for facility management:\n"
            "- GET /api/facilities - List all facilities\n"
            "- GET /api/facilities/{id} - Get facility details\n"
            "- GET /api/facilities/{id}/patients - Get patients by facility"
        )
        return self._reply(answer, facilities, intent="facilities", facilityType=facility_type)

    def _statistics(self) -> Answer:
        stats = self.data.get_system_stats()
        answer = (
            "**Healthcare System Statistics**\n\n"
            f"- Total Patients: {stats['totalPatients']}\n"
            f"- Total Facilities: {stats['totalFacilities']}\n"
            f"- Average Patients per Facility: {stats['averagePatientsPerFacility']:.1f}\n\n"
            "The system is actively managing healthcare data."
        )
        return self._reply(answer, stats, intent="statistics")

    def _patient_search(self, text: str) -> Answer:
        search_term = extract_search_term(text)
        patients = self.data.search_patients(search_term, None, self.config.search_limit)
        answer = (
            f"Found {len(patients)} patients matching your search.\n\n"
            "For advanced search, use:\n"
            f"GET /api/patients?search={search_term}"
        )
        return self._reply(answer, patients, intent="patient_search", searchTerm=search_term)


def extract_search_term(text: str) -> str:
    """Return the text after "named" or "search for", or "patient" if neither occurs."""
    for marker in _SEARCH_MARKERS:
        match = re.search(re.escape(marker), text, re.IGNORECASE)
        if match:
            term = text[match.end():].strip().rstrip("?.!").strip()
            if term:
                return term
    return "patient"


def _extract_facility_type(lowered: str) -> str | None:
    for keyword, facility_type in _FACILITY_TYPE_KEYWORDS:
        if keyword in lowered:
            return facility_type
    return None


def _contains_any(text: str, *needles: str) -> bool:
    return any(needle in text for needle in needles)
