import os
import tempfile
from pathlib import Path
from typing import Any

import pytest
from langchain_core.messages import AIMessage

from care_assistant.data.sqlite_store import SqliteDataQuery, seed_demo_data

# The API module wires a default app at import time; keep it offline and out of the repo.
os.environ.setdefault("CARE_SQLITE_PATH", str(Path(tempfile.gettempdir()) / "care_assistant_tests.db"))
os.environ.setdefault("CARE_REMOTE_ENABLED", "false")


class FakeChatModel:
    """Scripted stand-in for a tool-calling chat model."""

    def __init__(self, responses: list[Any]) -> None:
        self.responses = list(responses)
        self.calls: list[tuple[list[Any], dict[str, Any]]] = []
        self.bound_tools: list[Any] | None = None
        self.tool_choice: str | None = None

    def bind_tools(self, tools: list[Any], **kwargs: Any) -> "FakeChatModel":
        self.bound_tools = list(tools)
        self.tool_choice = kwargs.get("tool_choice")
        return self

    def invoke(self, messages: list[Any], **kwargs: Any) -> Any:
        self.calls.append((list(messages), kwargs))
        item = self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


def tool_call_message(name: str, args: dict[str, Any] | None = None, call_id: str = "call_1") -> AIMessage:
    return AIMessage(content="", tool_calls=[{"name": name, "args": args or {}, "id": call_id}])


@pytest.fixture
def store(tmp_path) -> SqliteDataQuery:
    data = SqliteDataQuery(tmp_path / "care.db")
    seed_demo_data(data)
    return data


@pytest.fixture
def empty_store(tmp_path) -> SqliteDataQuery:
    return SqliteDataQuery(tmp_path / "empty.db")


@pytest.fixture
def fake_llm():
    return FakeChatModel


@pytest.fixture
def tool_call():
    return tool_call_message
