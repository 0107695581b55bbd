"""Priority-ordered provider selection with a guaranteed rule-based answer."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from care_assistant.agent.fallback import RuleBasedProvider
from care_assistant.agent.provider import PROVIDER_PRIORITY, AnswerProvider, ProviderKind
from care_assistant.obs.tracing import Timer, TraceStore
from care_assistant.types import Answer, AnswerSource, ProviderHealth, Query

logger = logging.getLogger(__name__)

_UNEXPECTED_ERROR_TEXT = (
    "I apologize, but an unexpected error occurred. Please try again later."
)


@dataclass(frozen=True, slots=True)
class Registration:
    provider: AnswerProvider
    kind: ProviderKind

    @property
    def priority(self) -> int:
        return PROVIDER_PRIORITY[self.kind]


class Orchestrator:
    """Routes each query through the registered providers, best first.

    Providers are tried in descending priority (ties keep registration
    order). Disabled or unhealthy providers are skipped, the first answer
    without `is_error` wins, and if none succeeds the rule-based provider is
    called directly, whatever its registration state.
    """

    def __init__(
        self,
        *,
        fallback: RuleBasedProvider,
        trace_store: TraceStore | None = None,
    ) -> None:
        self.fallback = fallback
        self.trace_store = trace_store
        self._registrations: list[Registration] = []

    def register(self, provider: AnswerProvider, kind: ProviderKind) -> None:
        self._registrations.append(Registration(provider=provider, kind=kind))

    def providers_by_priority(self) -> list[AnswerProvider]:
        ordered = sorted(self._registrations, key=lambda reg: reg.priority, reverse=True)
        return [reg.provider for reg in ordered]

    def answer(self, query: Query) -> Answer:
        timer = Timer()
        try:
            with timer:
                answer = self._select_answer(query)
        except Exception:
            logger.exception("Unexpected failure while answering query")
            answer = Answer.failure(_UNEXPECTED_ERROR_TEXT, source=AnswerSource.ERROR)
        self._record_trace(query, answer, timer.elapsed_ms)
        return answer

    def status(self) -> dict[str, dict[str, Any]]:
        providers = self.providers_by_priority()
        if not any(provider is self.fallback for provider in providers):
            providers.append(self.fallback)
        return {
            provider.name: {
                "enabled": provider.is_enabled(),
                "health": provider.get_health().value,
            }
            for provider in providers
        }

    def _select_answer(self, query: Query) -> Answer:
        logger.info("Processing chat query: %s", query.text)
        for provider in self.providers_by_priority():
            try:
                if not _is_available(provider):
                    continue
                logger.info("Attempting provider: %s", provider.name)
                answer = provider.process_query(query)
            except Exception as exc:
                logger.warning("Provider %s raised: %s", provider.name, exc)
                continue

            if not answer.is_error:
                logger.info("Answered by provider: %s", provider.name)
                return answer
            logger.warning("Provider %s returned an error answer", provider.name)

        logger.info("Using rule-based fallback")
        return self.fallback.process_query(query)

    def _record_trace(self, query: Query, answer: Answer, latency_ms: float) -> None:
        if self.trace_store is None:
            return
        try:
            self.trace_store.create_record(
                question=query.text, answer=answer, latency_ms=latency_ms
            )
        except Exception:
            logger.exception("Failed to record trace for query")


def _is_available(provider: AnswerProvider) -> bool:
    enabled = provider.is_enabled()
    health = provider.get_health()
    if enabled and health is ProviderHealth.HEALTHY:
        return True
    logger.debug(
        "Skipping provider %s (enabled=%s, health=%s)",
        provider.name, enabled, getattr(health, "value", health),
    )
    return False
