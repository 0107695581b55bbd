"""FastAPI entrypoint for chat, provider status, and metrics endpoints."""

from __future__ import annotations

import logging
import os
from dataclasses import asdict
from typing import Any

from fastapi import FastAPI, HTTPException
from langchain_core.language_models import BaseChatModel
from pydantic import BaseModel, Field, ValidationError

from care_assistant.agent.dispatcher import ToolDispatcher
from care_assistant.agent.fallback import RuleBasedProvider
from care_assistant.agent.orchestrator import Orchestrator
from care_assistant.agent.provider import ProviderKind
from care_assistant.agent.remote import RemoteProvider
from care_assistant.config import DataStoreConfig, RemoteProviderConfig, RuleBasedConfig
from care_assistant.data.contract import DataQueryContract
from care_assistant.data.sqlite_store import SqliteDataQuery, seed_demo_data
from care_assistant.obs.tracing import TraceStore
from care_assistant.types import Query

logger = logging.getLogger(__name__)


class ChatRequest(BaseModel):
    query: str
    session_id: str | None = None
    context: dict[str, Any] = Field(default_factory=dict)


def build_orchestrator(
    data: DataQueryContract,
    *,
    remote_config: RemoteProviderConfig | None = None,
    rule_config: RuleBasedConfig | None = None,
    llm: BaseChatModel | None = None,
    trace_store: TraceStore | None = None,
) -> Orchestrator:
    """Wire the remote and rule-based providers over one data source."""
    rule_based = RuleBasedProvider(data, config=rule_config)
    orchestrator = Orchestrator(fallback=rule_based, trace_store=trace_store)

    remote = RemoteProvider(
        config=remote_config or RemoteProviderConfig.from_env(),
        dispatcher=ToolDispatcher.for_data(data),
        llm=llm,
    )
    orchestrator.register(remote, ProviderKind.REMOTE)
    orchestrator.register(rule_based, ProviderKind.RULE_BASED)
    if not remote.is_enabled():
        logger.info("Remote provider disabled; answers come from rule-based provider")
    return orchestrator


def create_app(orchestrator: Orchestrator, trace_store: TraceStore | None = None) -> FastAPI:
    app = FastAPI(title="Care Assistant", version="0.1.0")
    traces = trace_store or orchestrator.trace_store or TraceStore()

    def _answer(text: str, session_id: str | None, context: dict[str, Any]) -> dict[str, Any]:
        try:
            query = Query(text=text, session_id=session_id, context=context)
        except ValidationError as exc:
            raise HTTPException(
                status_code=422,
                detail=[error["msg"] for error in exc.errors()],
            ) from exc
        answer = orchestrator.answer(query)
        return {**answer.to_dict(), "sessionId": query.session_id}

    @app.get("/health")
    def health() -> dict[str, Any]:
        return {"status": "ok", "providers": orchestrator.status()}

    @app.post("/api/chat")
    def chat(request: ChatRequest) -> dict[str, Any]:
        return _answer(request.query, request.session_id, request.context)

    @app.get("/api/chat")
    def chat_simple(q: str) -> dict[str, Any]:
        return _answer(q, None, {})

    @app.get("/api/chat/status")
    def chat_status() -> dict[str, Any]:
        return orchestrator.status()

    @app.get("/traces")
    def trace_list(limit: int = 20) -> dict[str, Any]:
        records = [asdict(record) for record in traces.list_recent(limit=limit)]
        return {"items": records}

    @app.get("/traces/{trace_id}")
    def trace_detail(trace_id: str) -> dict[str, Any]:
        try:
            record = traces.get(trace_id)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return asdict(record)

    @app.get("/metrics")
    def metrics() -> dict[str, Any]:
        return traces.summary()

    return app


def _default_app() -> FastAPI:
    logging.basicConfig(
        level=os.getenv("CARE_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    store_config = DataStoreConfig.from_env()
    store = SqliteDataQuery(store_config.sqlite_path)
    if store_config.seed_demo:
        seed_demo_data(store)

    trace_store = TraceStore()
    orchestrator = build_orchestrator(store, trace_store=trace_store)
    return create_app(orchestrator, trace_store)


app = _default_app()
