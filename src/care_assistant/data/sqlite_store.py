"""SQLite-backed implementation of the data-query contract."""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import closing, contextmanager
from datetime import date
from pathlib import Path
from typing import Any

from care_assistant.data.contract import FacilityType
from care_assistant.data.masking import mask_email, mask_record_number

logger = logging.getLogger(__name__)

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS facilities (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        type TEXT NOT NULL,
        address TEXT NOT NULL DEFAULT '',
        is_active INTEGER NOT NULL DEFAULT 1
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS patients (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        first_name TEXT NOT NULL,
        last_name TEXT NOT NULL,
        email TEXT,
        medical_record_number TEXT NOT NULL UNIQUE,
        date_of_birth TEXT,
        facility_id INTEGER REFERENCES facilities(id),
        deleted_at TEXT
    )
    """,
)

_PATIENT_COLUMNS = """
    p.id, p.first_name, p.last_name, p.email, p.medical_record_number,
    p.date_of_birth, f.name AS facility_name, f.type AS facility_type
"""


class SqliteDataQuery:
    """Read-only queries over a local SQLite database.

    Only active facilities and patients without a `deleted_at` marker are
    visible. Every patient record leaves this class with its record number
    and email masked.
    """

    def __init__(self, sqlite_path: str | Path) -> None:
        self.db_path = Path(sqlite_path)
        self.ensure_schema()

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        with closing(sqlite3.connect(self.db_path)) as conn:
            conn.row_factory = sqlite3.Row
            with conn:
                yield conn

    def ensure_schema(self) -> None:
        with self._connection() as conn:
            for statement in _SCHEMA:
                conn.execute(statement)

    def add_facility(
        self,
        name: str,
        facility_type: FacilityType | str,
        *,
        address: str = "",
        is_active: bool = True,
    ) -> int:
        kind = FacilityType(str(getattr(facility_type, "value", facility_type)).upper())
        with self._connection() as conn:
            cur = conn.execute(
                "INSERT INTO facilities(name, type, address, is_active) VALUES(?, ?, ?, ?)",
                (name, kind.value, address, int(is_active)),
            )
            return int(cur.lastrowid)

    def add_patient(
        self,
        first_name: str,
        last_name: str,
        medical_record_number: str,
        *,
        email: str | None = None,
        date_of_birth: date | None = None,
        facility_id: int | None = None,
        deleted: bool = False,
    ) -> int:
        with self._connection() as conn:
            cur = conn.execute(
                """
                INSERT INTO patients(
                    first_name, last_name, email, medical_record_number,
                    date_of_birth, facility_id, deleted_at
                ) VALUES(?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    first_name,
                    last_name,
                    email,
                    medical_record_number,
                    date_of_birth.isoformat() if date_of_birth else None,
                    facility_id,
                    date.today().isoformat() if deleted else None,
                ),
            )
            return int(cur.lastrowid)

    def get_sample_patients(self, count: int) -> list[dict[str, Any]]:
        with self._connection() as conn:
            rows = conn.execute(
                f"""
                SELECT {_PATIENT_COLUMNS}
                FROM patients p LEFT JOIN facilities f ON f.id = p.facility_id
                WHERE p.deleted_at IS NULL
                ORDER BY p.id
                LIMIT ?
                """,
                (count,),
            ).fetchall()
        return [_patient_profile(row) for row in rows]

    def search_patients(
        self,
        search_term: str | None,
        facility_id: int | None,
        limit: int,
    ) -> list[dict[str, Any]]:
        clauses = ["p.deleted_at IS NULL"]
        params: list[Any] = []
        if search_term:
            pattern = f"%{search_term.strip().lower()}%"
            clauses.append(
                "(lower(p.first_name) LIKE ? OR lower(p.last_name) LIKE ?"
                " OR lower(coalesce(p.email, '')) LIKE ?"
                " OR lower(p.medical_record_number) LIKE ?)"
            )
            params.extend([pattern] * 4)
        if facility_id is not None:
            clauses.append("p.facility_id = ?")
            params.append(facility_id)
        params.append(limit)

        with self._connection() as conn:
            rows = conn.execute(
                f"""
                SELECT {_PATIENT_COLUMNS}
                FROM patients p LEFT JOIN facilities f ON f.id = p.facility_id
                WHERE {" AND ".join(clauses)}
                ORDER BY p.last_name, p.first_name, p.id
                LIMIT ?
                """,
                params,
            ).fetchall()
        return [_search_hit(row) for row in rows]

    def get_patient_count(self) -> int:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT count(*) FROM patients WHERE deleted_at IS NULL"
            ).fetchone()
        return int(row[0])

    def get_facilities(
        self, facility_type: str | None, limit: int
    ) -> list[dict[str, Any]]:
        if facility_type is None:
            query = "SELECT * FROM facilities WHERE is_active = 1 ORDER BY id LIMIT ?"
            params: tuple[Any, ...] = (limit,)
        else:
            kind = FacilityType(str(facility_type).upper())
            query = (
                "SELECT * FROM facilities WHERE is_active = 1 AND type = ?"
                " ORDER BY id LIMIT ?"
            )
            params = (kind.value, limit)
        with self._connection() as conn:
            rows = conn.execute(query, params).fetchall()
        return [_facility(row) for row in rows]

    def get_facilities_with_patient_counts(self, limit: int) -> list[dict[str, Any]]:
        with self._connection() as conn:
            rows = conn.execute(
                """
                SELECT f.*, (
                    SELECT count(*) FROM patients p
                    WHERE p.facility_id = f.id AND p.deleted_at IS NULL
                ) AS patient_count
                FROM facilities f
                WHERE f.is_active = 1
                ORDER BY f.id
                LIMIT ?
                """,
                (limit,),
            ).fetchall()
        return [
            {**_facility(row), "patientCount": int(row["patient_count"])}
            for row in rows
        ]

    def get_facility_stats(self) -> dict[str, int]:
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT type, count(*) FROM facilities WHERE is_active = 1"
                " GROUP BY type ORDER BY type"
            ).fetchall()
        return {str(row[0]): int(row[1]) for row in rows}

    def get_facility_count(self) -> int:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT count(*) FROM facilities WHERE is_active = 1"
            ).fetchone()
        return int(row[0])

    def get_system_stats(self) -> dict[str, Any]:
        total_patients = self.get_patient_count()
        total_facilities = self.get_facility_count()
        average = total_patients / total_facilities if total_facilities > 0 else 0.0
        return {
            "totalPatients": total_patients,
            "totalFacilities": total_facilities,
            "facilitiesByType": self.get_facility_stats(),
            "averagePatientsPerFacility": average,
        }


def seed_demo_data(store: SqliteDataQuery) -> None:
    """Populate an empty store with a handful of facilities and patients."""
    if store.get_facility_count() > 0:
        return

    general = store.add_facility("General Hospital", FacilityType.HOSPITAL, address="1 Main St")
    riverside = store.add_facility("Riverside Clinic", FacilityType.CLINIC, address="22 River Rd")
    store.add_facility("Central Lab", FacilityType.LAB, address="5 Science Park")
    store.add_facility("Corner Pharmacy", FacilityType.PHARMACY, address="9 Market Sq")

    store.add_patient(
        "John", "Smith", "MRN-0001-4821",
        email="john.smith@example.com", date_of_birth=date(1978, 4, 2), facility_id=general,
    )
    store.add_patient(
        "Maria", "Garcia", "MRN-0002-7710",
        email="maria.garcia@example.com", date_of_birth=date(1990, 11, 19), facility_id=general,
    )
    store.add_patient(
        "Wei", "Chen", "MRN-0003-0935",
        email="wc@example.com", date_of_birth=date(1965, 7, 30), facility_id=riverside,
    )
    store.add_patient(
        "Amara", "Smith", "MRN-0004-5562",
        email="amara.smith@example.com", date_of_birth=date(2001, 2, 14), facility_id=riverside,
    )
    logger.info("Seeded demo data into %s", store.db_path)


def _age(date_of_birth: str | None) -> int:
    if not date_of_birth:
        return 0
    born = date.fromisoformat(date_of_birth)
    today = date.today()
    return today.year - born.year - ((today.month, today.day) < (born.month, born.day))


def _patient_profile(row: sqlite3.Row) -> dict[str, Any]:
    return {
        "id": row["id"],
        "firstName": row["first_name"],
        "lastName": row["last_name"],
        "facility": row["facility_name"] or "",
        "facilityType": row["facility_type"] or "",
        "medicalRecordNumber": mask_record_number(row["medical_record_number"]),
        "age": _age(row["date_of_birth"]),
        "email": mask_email(row["email"]),
    }


def _search_hit(row: sqlite3.Row) -> dict[str, Any]:
    return {
        "id": row["id"],
        "name": f"{row['first_name']} {row['last_name']}",
        "facility": row["facility_name"] or "",
        "facilityType": row["facility_type"] or "",
        "medicalRecordNumber": mask_record_number(row["medical_record_number"]),
    }


def _facility(row: sqlite3.Row) -> dict[str, Any]:
    return {
        "id": row["id"],
        "name": row["name"],
        "type": row["type"],
        "address": row["address"],
    }
