"""Thread-safe health memory for providers that depend on a remote service."""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone

from care_assistant.types import ProviderHealth


@dataclass(frozen=True, slots=True)
class CallOutcome:
    succeeded: bool
    completed_at: datetime
    reason: str | None = None


class HealthCell:
    """Records remote-call outcomes and derives HEALTHY/UNHEALTHY from the latest.

    All reads and writes go through one lock, so concurrent queries against
    the same provider never observe a half-applied transition.
    """

    def __init__(self, history_size: int = 20) -> None:
        self._lock = threading.Lock()
        self._outcomes: deque[CallOutcome] = deque(maxlen=history_size)
        self._state = ProviderHealth.HEALTHY
        self._last_error: str | None = None

    def current(self) -> ProviderHealth:
        with self._lock:
            return self._state

    @property
    def last_error(self) -> str | None:
        with self._lock:
            return self._last_error

    def mark_healthy(self) -> ProviderHealth:
        return self._record(CallOutcome(True, datetime.now(timezone.utc)))

    def mark_unhealthy(self, reason: str | None = None) -> ProviderHealth:
        return self._record(CallOutcome(False, datetime.now(timezone.utc), reason))

    def recent_outcomes(self) -> list[CallOutcome]:
        with self._lock:
            return list(self._outcomes)

    def _record(self, outcome: CallOutcome) -> ProviderHealth:
        with self._lock:
            self._outcomes.append(outcome)
            if outcome.succeeded:
                self._state = ProviderHealth.HEALTHY
            else:
                self._state = ProviderHealth.UNHEALTHY
                self._last_error = outcome.reason
            return self._state
