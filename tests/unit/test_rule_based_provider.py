import pytest

from care_assistant.agent.fallback import RuleBasedProvider, extract_search_term
from care_assistant.types import AnswerSource, ProviderHealth, Query


def _ask(provider: RuleBasedProvider, text: str):
    return provider.process_query(Query(text=text))


def test_always_enabled_and_healthy(store) -> None:
    provider = RuleBasedProvider(store)

    assert provider.is_enabled() is True
    assert provider.get_health() is ProviderHealth.HEALTHY


def test_sample_patients_are_masked(store) -> None:
    answer = _ask(RuleBasedProvider(store), "Show me some sample patient profiles")

    assert answer.source is AnswerSource.RULE_BASED
    assert answer.text.startswith("Here are 3 sample patient profiles")
    assert len(answer.data) == 3
    first = answer.data[0]
    assert first["medicalRecordNumber"] == "***4821"
    assert first["email"] == "jo***@example.com"


def test_sample_patients_on_empty_store_returns_guidance(empty_store) -> None:
    answer = _ask(RuleBasedProvider(empty_store), "give me an example")

    assert answer.data is None
    assert "don't have any sample patient profiles" in answer.text
    assert not answer.is_error


def test_distribution_analysis(store) -> None:
    answer = _ask(RuleBasedProvider(store), "Analyze patient distribution by facility type")

    assert "**Patient Distribution Analysis**" in answer.text
    assert "Total Patients: 4" in answer.text
    assert "Average Patients per Facility: 1.0" in answer.text
    assert "HOSPITAL: 1 facilities" in answer.text
    assert answer.data[0]["facilitiesByType"] == {"CLINIC": 1, "HOSPITAL": 1, "LAB": 1, "PHARMACY": 1}


def test_generic_analysis_guidance(store) -> None:
    answer = _ask(RuleBasedProvider(store), "Can you do some analysis?")

    assert "**Analysis Capabilities**" in answer.text
    assert answer.data is None


@pytest.mark.parametrize(
    ("text", "expected_types"),
    [
        ("Show me all hospitals", ["HOSPITAL"]),
        ("Which clinics are open?", ["CLINIC"]),
        ("list every facility", ["HOSPITAL", "CLINIC", "LAB", "PHARMACY"]),
    ],
)
def test_facility_listing_with_type_filter(store, text, expected_types) -> None:
    answer = _ask(RuleBasedProvider(store), text)

    assert [facility["type"] for facility in answer.data] == expected_types


def test_facility_type_phrase_in_text(store) -> None:
    answer = _ask(RuleBasedProvider(store), "facility list for the lab")

    assert "lab facilities" in answer.text
    assert answer.metadata["facilityType"] == "LAB"


def test_statistics(store) -> None:
    answer = _ask(RuleBasedProvider(store), "How many patients are in the system?")

    assert "**Healthcare System Statistics**" in answer.text
    assert "Total Patients: 4" in answer.text
    assert "Total Facilities: 4" in answer.text


def test_patient_search_uses_original_case_term(store) -> None:
    answer = _ask(RuleBasedProvider(store), "search for patients named Smith")

    assert answer.metadata["searchTerm"] == "Smith"
    assert answer.text.startswith(f"Found {len(store.search_patients('Smith', None, 5))} patients")
    assert len(answer.data) == 2


def test_help_and_general(store) -> None:
    provider = RuleBasedProvider(store)

    assert "**Healthcare Management Assistant**" in _ask(provider, "help").text
    assert "I'm your healthcare management assistant" in _ask(provider, "good morning").text


def test_first_matching_rule_wins(store) -> None:
    answer = _ask(RuleBasedProvider(store), "sample hospital statistics")

    assert answer.metadata["intent"] == "sample_patients"


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("search for patients named Smith", "Smith"),
        ("please search for Garcia", "Garcia"),
        ("search patient records", "patient"),
        ("search for patients named", "patients named"),
        ("İstanbul clinic: search for patients NAMED Smith", "Smith"),
    ],
)
def test_extract_search_term(text, expected) -> None:
    assert extract_search_term(text) == expected


def test_internal_fault_becomes_generic_error_answer() -> None:
    class BrokenData:
        def get_system_stats(self):
            raise RuntimeError("secret connection string")

    answer = _ask(RuleBasedProvider(BrokenData()), "show stats")

    assert answer.is_error is True
    assert answer.source is AnswerSource.ERROR
    assert "secret" not in answer.text
    assert answer.text.startswith("I apologize")
