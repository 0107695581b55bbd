"""Shared domain models."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_QUERY_CHARS = 1000


class Query(BaseModel):
    """A natural-language question submitted by a caller."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(min_length=1, max_length=MAX_QUERY_CHARS)
    session_id: str | None = None
    context: dict[str, Any] = Field(default_factory=dict)

    @field_validator("text")
    @classmethod
    def _reject_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Query cannot be blank")
        return value


class AnswerSource(str, Enum):
    REMOTE = "REMOTE"
    REMOTE_DIRECT = "REMOTE_DIRECT"
    RULE_BASED = "RULE_BASED"
    DATABASE_SHORTCUT = "DATABASE_SHORTCUT"
    SYSTEM = "SYSTEM"
    ERROR = "ERROR"


class ProviderHealth(str, Enum):
    HEALTHY = "HEALTHY"
    UNHEALTHY = "UNHEALTHY"
    DISABLED = "DISABLED"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class Answer:
    """The single response produced for a query.

    `metadata` and each record in `data` are wrapped in read-only mappings on
    creation. Values nested inside a record are not copied.
    """

    text: str
    source: AnswerSource
    data: tuple[Mapping[str, Any], ...] | None = None
    metadata: Mapping[str, Any] | None = None
    is_error: bool = False
    timestamp: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        if self.data is not None:
            records = tuple(MappingProxyType(dict(record)) for record in self.data)
            object.__setattr__(self, "data", records)
        if self.metadata is not None:
            object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @classmethod
    def success(
        cls,
        text: str,
        source: AnswerSource,
        *,
        data: Any = None,
        metadata: dict[str, Any] | None = None,
    ) -> "Answer":
        return cls(text=text, source=source, data=as_records(data), metadata=metadata)

    @classmethod
    def failure(
        cls,
        text: str,
        *,
        source: AnswerSource = AnswerSource.ERROR,
        metadata: dict[str, Any] | None = None,
    ) -> "Answer":
        return cls(text=text, source=source, metadata=metadata, is_error=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "answer": self.text,
            "source": self.source.value,
            "data": [dict(record) for record in self.data] if self.data is not None else None,
            "metadata": dict(self.metadata) if self.metadata is not None else None,
            "isError": self.is_error,
            "timestamp": self.timestamp.isoformat(),
        }


def as_records(payload: Any) -> tuple[dict[str, Any], ...] | None:
    """Normalize a structured payload into an ordered sequence of records."""
    if payload is None:
        return None
    if isinstance(payload, Mapping):
        return (dict(payload),)
    if isinstance(payload, Sequence) and not isinstance(payload, (str, bytes)):
        return tuple(
            dict(item) if isinstance(item, Mapping) else {"value": item}
            for item in payload
        )
    return ({"value": payload},)


@dataclass(frozen=True, slots=True)
class ToolCall:
    """A tool invocation requested by the remote model."""

    function_name: str
    arguments: dict[str, Any]
    call_id: str | None = None


@dataclass(frozen=True, slots=True)
class ToolTrace:
    """Timing and preview of one executed tool call."""

    name: str
    input_payload: dict[str, Any]
    output_preview: str
    latency_ms: float


@dataclass(frozen=True, slots=True)
class ToolResult:
    """Outcome of a dispatched tool call: a payload or an error message."""

    payload: Any = None
    error: str | None = None
    trace: ToolTrace | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_content(self) -> str:
        if self.error is not None:
            return json.dumps({"error": self.error})
        return json.dumps(self.payload, default=str)
