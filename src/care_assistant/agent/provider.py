"""Capability shared by every answer provider, plus their priority table."""

from __future__ import annotations

from enum import Enum
from typing import Protocol, runtime_checkable

from care_assistant.types import Answer, ProviderHealth, Query


class ProviderKind(str, Enum):
    REMOTE = "REMOTE"
    RULE_BASED = "RULE_BASED"
    OTHER = "OTHER"


PROVIDER_PRIORITY: dict[ProviderKind, int] = {
    ProviderKind.REMOTE: 100,
    ProviderKind.RULE_BASED: 10,
    ProviderKind.OTHER: 0,
}


@runtime_checkable
class AnswerProvider(Protocol):
    """Something that can turn a query into an answer.

    `process_query` reports failure by returning an `Answer` with
    `is_error=True` rather than raising.
    """

    name: str

    def process_query(self, query: Query) -> Answer: ...

    def is_enabled(self) -> bool: ...

    def get_health(self) -> ProviderHealth: ...
