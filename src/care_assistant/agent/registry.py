"""Tool registry built on Pydantic v2 models."""

from __future__ import annotations

import json
from collections.abc import Callable
from time import perf_counter
from typing import Any

from langchain_core.tools import StructuredTool
from pydantic import BaseModel, ConfigDict

from care_assistant.errors import ToolExecutionError, UnsupportedToolError
from care_assistant.types import ToolTrace


class ToolSpec(BaseModel):
    """Declarative tool specification for registration and validation."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    description: str
    args_schema: type[BaseModel]
    handler: Callable[[BaseModel], Any]

    def invoke(self, payload: dict[str, Any]) -> Any:
        data = self.args_schema.model_validate(payload)
        return self.handler(data)


class ToolRegistry:
    """Stores tool specs and exports LangChain-compatible tool objects."""

    def __init__(self) -> None:
        self._tools: dict[str, ToolSpec] = {}

    def register(self, spec: ToolSpec) -> None:
        if spec.name in self._tools:
            raise ValueError(f"Tool already registered: {spec.name}")
        self._tools[spec.name] = spec

    def names(self) -> list[str]:
        return list(self._tools)

    def execute(self, name: str, payload: dict[str, Any]) -> tuple[Any, ToolTrace]:
        """Run a tool and return its output with a latency trace."""
        spec = self._tools.get(name)
        if spec is None:
            raise UnsupportedToolError(name)
        return self._execute_spec(spec, payload)

    def as_langchain_tools(self) -> list[StructuredTool]:
        tools: list[StructuredTool] = []
        for spec in self._tools.values():
            tools.append(
                StructuredTool.from_function(
                    name=spec.name,
                    description=spec.description,
                    args_schema=spec.args_schema,
                    func=self._build_function(spec),
                )
            )
        return tools

    def _build_function(self, spec: ToolSpec) -> Callable[..., Any]:
        def _callable(**kwargs: Any) -> Any:
            output, _ = self._execute_spec(spec, kwargs)
            return output

        return _callable

    def _execute_spec(self, spec: ToolSpec, payload: dict[str, Any]) -> tuple[Any, ToolTrace]:
        start = perf_counter()
        try:
            output = spec.invoke(payload)
        except Exception as exc:
            raise ToolExecutionError(f"Error executing function: {exc}") from exc
        latency_ms = (perf_counter() - start) * 1000.0

        trace = ToolTrace(
            name=spec.name,
            input_payload=payload,
            output_preview=json.dumps(output, default=str)[:320],
            latency_ms=latency_ms,
        )
        return output, trace
