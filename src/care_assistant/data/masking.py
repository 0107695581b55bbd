"""Masking of sensitive patient fields before they reach a provider."""

from __future__ import annotations

_MASK = "***"


def mask_record_number(value: str | None) -> str:
    """Keep only the last 4 characters of a medical record number."""
    if value is None or len(value) <= 4:
        return _MASK
    return _MASK + value[-4:]


def mask_email(email: str | None) -> str:
    """Render `jane.doe@x.org` as `ja***@x.org`; short local parts are fully hidden."""
    if not email or "@" not in email:
        return _MASK
    at_index = email.index("@")
    if at_index > 2:
        return email[:2] + _MASK + email[at_index:]
    return _MASK + email[at_index:]
