"""Language-model-backed provider speaking the two-round tool-calling protocol."""

from __future__ import annotations

import logging
import threading
import time
from typing import Any

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import (
    AIMessage,
    BaseMessage,
    HumanMessage,
    SystemMessage,
    ToolMessage,
)
from langchain_core.runnables import Runnable

from care_assistant.agent.dispatcher import ToolDispatcher
from care_assistant.agent.health import HealthCell
from care_assistant.config import RemoteProviderConfig
from care_assistant.errors import (
    MalformedRemoteResponseError,
    ProviderDisabledError,
    RemoteCallError,
)
from care_assistant.types import (
    Answer,
    AnswerSource,
    ProviderHealth,
    Query,
    ToolCall,
    ToolResult,
)

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """
You are a healthcare management assistant. You help users query patient and facility data.
Use the provided tools to fetch actual data from the system.

Guidelines:
- Be concise and helpful
- Use real data from the system when available
- Maintain patient privacy - never expose full medical record numbers or sensitive information
- If you can't find specific data, suggest alternative queries
- Format responses clearly with bullet points when appropriate
""".strip()

_FAILURE_TEXT = "The language model service could not answer this query."


def build_chat_model(config: RemoteProviderConfig) -> BaseChatModel:
    """Create the OpenAI-compatible chat client described by `config`."""
    from langchain_openai import ChatOpenAI

    return ChatOpenAI(
        model=config.model,
        api_key=config.api_key,
        base_url=config.base_url,
        timeout=config.timeout_seconds,
        max_retries=0,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
    )


class RemoteProvider:
    """Answers queries through a remote chat model that may request one tool.

    Round one sends the system prompt, the user question and the tool
    declarations. If the model asks for a tool, only the first request is
    executed through the dispatcher and its result is sent back in round two.
    Each round is bounded by the per-round timeout and by what is left of the
    overall deadline.
    """

    name = "Remote LLM Service"

    def __init__(
        self,
        *,
        config: RemoteProviderConfig,
        dispatcher: ToolDispatcher,
        llm: BaseChatModel | None = None,
    ) -> None:
        self.config = config
        self.dispatcher = dispatcher
        self.health = HealthCell()
        self._llm = llm
        self._tool_llm: Runnable | None = None
        self._init_lock = threading.Lock()

    def is_enabled(self) -> bool:
        return self.config.enabled and self.config.has_credentials

    def get_health(self) -> ProviderHealth:
        if not self.is_enabled():
            return ProviderHealth.DISABLED
        return self.health.current()

    def process_query(self, query: Query) -> Answer:
        try:
            self._ensure_enabled()
        except ProviderDisabledError as exc:
            logger.debug("%s", exc)
            return self._failure(type(exc).__name__)

        deadline = time.monotonic() + self._budget_seconds(query)
        try:
            logger.info("Processing query with remote model: %s", query.text)
            answer = self._run_protocol(query, deadline)
        except Exception as exc:
            self.health.mark_unhealthy(f"{type(exc).__name__}: {exc}")
            logger.warning("%s failed: %s", self.name, exc)
            return self._failure(type(exc).__name__)

        self.health.mark_healthy()
        return answer

    def _ensure_enabled(self) -> None:
        if not self.config.enabled:
            raise ProviderDisabledError(f"{self.name} is disabled by configuration")
        if not self.config.has_credentials:
            raise ProviderDisabledError(f"{self.name} has no API key configured")

    def _budget_seconds(self, query: Query) -> float:
        # Callers may tighten, never extend, the configured deadline.
        requested = query.context.get("deadline_seconds")
        if isinstance(requested, (int, float)) and requested > 0:
            return min(float(requested), self.config.deadline_seconds)
        return self.config.deadline_seconds

    def _run_protocol(self, query: Query, deadline: float) -> Answer:
        messages: list[BaseMessage] = [
            SystemMessage(content=SYSTEM_PROMPT),
            HumanMessage(content=query.text),
        ]
        first = self._call(
            self._get_tool_llm(),
            messages,
            deadline,
            max_tokens=self.config.max_tokens,
            temperature=self.config.temperature,
        )

        if not first.tool_calls:
            if first.invalid_tool_calls:
                raise MalformedRemoteResponseError(
                    "Remote tool call arguments could not be parsed"
                )
            return Answer.success(
                _message_text(first),
                AnswerSource.REMOTE_DIRECT,
                metadata=self._metadata(first),
            )

        if len(first.tool_calls) > 1:
            logger.info(
                "Model requested %d tool calls; only the first is executed",
                len(first.tool_calls),
            )
        call = _to_tool_call(first.tool_calls[0])
        result = self.dispatcher.execute(call.function_name, call.arguments)

        followup = [
            *messages,
            first,
            ToolMessage(content=result.to_content(), tool_call_id=call.call_id),
        ]
        final = self._call(
            self._get_llm(),
            followup,
            deadline,
            max_tokens=self.config.followup_max_tokens,
        )
        return Answer.success(
            _message_text(final),
            AnswerSource.REMOTE,
            data=result.payload if result.ok else None,
            metadata=self._metadata(final, call=call, result=result),
        )

    def _call(
        self,
        model: Runnable,
        messages: list[BaseMessage],
        deadline: float,
        **kwargs: Any,
    ) -> AIMessage:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise RemoteCallError("Remote deadline exceeded before the call was made")
        timeout = min(self.config.timeout_seconds, remaining)

        logger.debug("Remote request with %d messages (timeout %.1fs)", len(messages), timeout)
        try:
            response = model.invoke(messages, timeout=timeout, **kwargs)
        except Exception as exc:
            raise RemoteCallError(f"Remote call failed: {exc}") from exc

        if not isinstance(response, AIMessage):
            raise MalformedRemoteResponseError("Remote response carried no assistant message")
        return response

    def _get_llm(self) -> BaseChatModel:
        with self._init_lock:
            if self._llm is None:
                self._llm = build_chat_model(self.config)
            return self._llm

    def _get_tool_llm(self) -> Runnable:
        llm = self._get_llm()
        with self._init_lock:
            if self._tool_llm is None:
                self._tool_llm = llm.bind_tools(
                    self.dispatcher.registry.as_langchain_tools(),
                    tool_choice="auto",
                )
            return self._tool_llm

    def _failure(self, error_kind: str) -> Answer:
        return Answer.failure(
            _FAILURE_TEXT, metadata={"provider": self.name, "error": error_kind}
        )

    def _metadata(
        self,
        message: AIMessage,
        *,
        call: ToolCall | None = None,
        result: ToolResult | None = None,
    ) -> dict[str, Any]:
        metadata: dict[str, Any] = {"provider": self.name, "model": self.config.model}
        if call is not None and result is not None:
            metadata["tool"] = call.function_name
            metadata["toolError"] = not result.ok
            if result.trace is not None:
                metadata["toolLatencyMs"] = round(result.trace.latency_ms, 3)
        usage = getattr(message, "usage_metadata", None)
        if usage:
            metadata["tokenUsage"] = dict(usage)
        return metadata


def _to_tool_call(raw: dict[str, Any]) -> ToolCall:
    name = raw.get("name")
    call_id = raw.get("id")
    if not name or not call_id:
        raise MalformedRemoteResponseError("Remote tool call is missing its name or id")
    args = raw.get("args") or {}
    if not isinstance(args, dict):
        raise MalformedRemoteResponseError("Remote tool call arguments are not an object")
    return ToolCall(function_name=str(name), arguments=args, call_id=str(call_id))


def _message_text(message: AIMessage) -> str:
    content = message.content
    if isinstance(content, list):
        parts: list[str] = []
        for item in content:
            if isinstance(item, dict):
                if "text" in item:
                    parts.append(str(item["text"]))
            else:
                parts.append(str(item))
        content = " ".join(parts)
    text = str(content or "").strip()
    if not text:
        raise MalformedRemoteResponseError("Remote response message has no content")
    return text
