"""Read-only data-query contract consumed by the answer providers."""

from __future__ import annotations

from enum import Enum
from typing import Any, Protocol


class FacilityType(str, Enum):
    HOSPITAL = "HOSPITAL"
    CLINIC = "CLINIC"
    LAB = "LAB"
    PHARMACY = "PHARMACY"
    OTHER = "OTHER"


class DataQueryContract(Protocol):
    """Aggregate and listing queries over patient and facility data.

    Patient-shaped records returned by an implementation must already have
    their medical record number and email masked (see `data.masking`).
    """

    def get_sample_patients(self, count: int) -> list[dict[str, Any]]: ...

    def search_patients(
        self,
        search_term: str | None,
        facility_id: int | None,
        limit: int,
    ) -> list[dict[str, Any]]: ...

    def get_patient_count(self) -> int: ...

    def get_facilities(
        self, facility_type: str | None, limit: int
    ) -> list[dict[str, Any]]: ...

    def get_facilities_with_patient_counts(self, limit: int) -> list[dict[str, Any]]: ...

    def get_facility_stats(self) -> dict[str, int]: ...

    def get_facility_count(self) -> int: ...

    def get_system_stats(self) -> dict[str, Any]: ...
