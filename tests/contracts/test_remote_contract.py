from care_assistant.agent.remote import SYSTEM_PROMPT
from care_assistant.agent.tools import (
    FacilitiesInput,
    FacilityCountsInput,
    SamplePatientsInput,
    SearchPatientsInput,
)
from care_assistant.agent.dispatcher import ToolDispatcher
from care_assistant.config import RemoteProviderConfig


def test_prompt_contains_privacy_constraints() -> None:
    assert "Maintain patient privacy" in SYSTEM_PROMPT
    assert "never expose full medical record numbers" in SYSTEM_PROMPT
    assert "Use the provided tools" in SYSTEM_PROMPT


def test_tool_declarations_are_all_optional_with_documented_defaults() -> None:
    for schema in (SamplePatientsInput, SearchPatientsInput, FacilitiesInput, FacilityCountsInput):
        assert "required" not in schema.model_json_schema()

    assert SamplePatientsInput().count == 3
    assert FacilityCountsInput().limit == 20
    assert SearchPatientsInput().facility_id is None
    assert FacilitiesInput().type is None


def test_exported_tool_names_are_protocol_identifiers(store) -> None:
    dispatcher = ToolDispatcher.for_data(store)

    names = [tool.name for tool in dispatcher.registry.as_langchain_tools()]

    assert names == [
        "get_sample_patients",
        "search_patients",
        "get_facilities",
        "get_facilities_with_patient_counts",
        "get_system_stats",
        "get_patient_count",
        "get_facility_count",
    ]


def test_endpoint_url_maps_to_client_base_url() -> None:
    assert RemoteProviderConfig().base_url == "https://api.openai.com/v1"
    assert RemoteProviderConfig(api_url="http://llm.local/v1/").base_url == "http://llm.local/v1"
    assert RemoteProviderConfig().has_credentials is False
