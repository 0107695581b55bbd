"""Data-query tools exposed to the remote model."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from care_assistant.agent.registry import ToolRegistry, ToolSpec
from care_assistant.data.contract import DataQueryContract, FacilityType

SEARCH_RESULT_CAP = 10
FACILITY_RESULT_CAP = 20


class SamplePatientsInput(BaseModel):
    count: int = Field(
        default=3, ge=1, le=100,
        description="Number of sample patients to retrieve, default is 3",
    )


class SearchPatientsInput(BaseModel):
    search_term: str | None = Field(
        default=None,
        description="Search term for patient name, email, or medical record number",
    )
    facility_id: int | None = Field(
        default=None, description="Filter by specific facility ID"
    )


class FacilitiesInput(BaseModel):
    type: FacilityType | None = Field(default=None, description="Filter by facility type")

    @field_validator("type", mode="before")
    @classmethod
    def _upper(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


class FacilityCountsInput(BaseModel):
    limit: int = Field(
        default=20, ge=1, le=100,
        description="Maximum number of facilities to return, default is 20",
    )


class NoArgsInput(BaseModel):
    pass


def register_data_tools(registry: ToolRegistry, data: DataQueryContract) -> None:
    """Register the fixed tool set used by the remote provider.

    Tools:
    - `get_sample_patients`: masked sample patient profiles.
    - `search_patients`: name/email/record-number search, capped at 10 hits.
    - `get_facilities`: active facilities, optionally by type, capped at 20.
    - `get_facilities_with_patient_counts`: facilities plus patient load.
    - `get_system_stats` / `get_patient_count` / `get_facility_count`: aggregates.
    """

    def _sample_patients(input_data: SamplePatientsInput) -> list[dict[str, Any]]:
        return data.get_sample_patients(input_data.count)

    def _search_patients(input_data: SearchPatientsInput) -> dict[str, Any]:
        patients = data.search_patients(
            input_data.search_term, input_data.facility_id, SEARCH_RESULT_CAP
        )
        return {"count": len(patients), "patients": patients}

    def _facilities(input_data: FacilitiesInput) -> list[dict[str, Any]]:
        facility_type = input_data.type.value if input_data.type else None
        return data.get_facilities(facility_type, FACILITY_RESULT_CAP)

    def _facilities_with_counts(input_data: FacilityCountsInput) -> list[dict[str, Any]]:
        return data.get_facilities_with_patient_counts(input_data.limit)

    def _system_stats(_: NoArgsInput) -> dict[str, Any]:
        return data.get_system_stats()

    def _patient_count(_: NoArgsInput) -> dict[str, int]:
        return {"patientCount": data.get_patient_count()}

    def _facility_count(_: NoArgsInput) -> dict[str, int]:
        return {"facilityCount": data.get_facility_count()}

    specs = [
        ToolSpec(
            name="get_sample_patients",
            description="Get sample patient profiles from the healthcare system",
            args_schema=SamplePatientsInput,
            handler=_sample_patients,
        ),
        ToolSpec(
            name="search_patients",
            description="Search patients by name, facility, or other criteria",
            args_schema=SearchPatientsInput,
            handler=_search_patients,
        ),
        ToolSpec(
            name="get_facilities",
            description="Get list of healthcare facilities with their details",
            args_schema=FacilitiesInput,
            handler=_facilities,
        ),
        ToolSpec(
            name="get_facilities_with_patient_counts",
            description="Get facilities with their patient counts for analysis",
            args_schema=FacilityCountsInput,
            handler=_facilities_with_counts,
        ),
        ToolSpec(
            name="get_system_stats",
            description="Get system statistics including patient counts and facility counts",
            args_schema=NoArgsInput,
            handler=_system_stats,
        ),
        ToolSpec(
            name="get_patient_count",
            description="Get total number of patients in the system",
            args_schema=NoArgsInput,
            handler=_patient_count,
        ),
        ToolSpec(
            name="get_facility_count",
            description="Get total number of facilities in the system",
            args_schema=NoArgsInput,
            handler=_facility_count,
        ),
    ]
    for spec in specs:
        registry.register(spec)
