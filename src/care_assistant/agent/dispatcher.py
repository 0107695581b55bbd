"""Executes remote tool requests against the data-query contract."""

from __future__ import annotations

import logging
from typing import Any

from care_assistant.agent.registry import ToolRegistry
from care_assistant.agent.tools import register_data_tools
from care_assistant.data.contract import DataQueryContract
from care_assistant.errors import ToolExecutionError, UnsupportedToolError
from care_assistant.types import ToolResult

logger = logging.getLogger(__name__)


class ToolDispatcher:
    """Runs one named tool and always returns a `ToolResult`.

    Unknown tool names and failures while validating arguments or querying
    data are reported as `ToolResult.error` so that the caller can hand them
    back to the model in the tool round.
    """

    def __init__(self, registry: ToolRegistry) -> None:
        self.registry = registry

    @classmethod
    def for_data(cls, data: DataQueryContract) -> "ToolDispatcher":
        registry = ToolRegistry()
        register_data_tools(registry, data)
        return cls(registry)

    def supported_functions(self) -> list[str]:
        return self.registry.names()

    def supports(self, function_name: str) -> bool:
        return function_name in self.registry.names()

    def execute(self, function_name: str, arguments: dict[str, Any] | None) -> ToolResult:
        logger.info("Executing function: %s with arguments: %s", function_name, arguments)
        try:
            payload, trace = self.registry.execute(function_name, dict(arguments or {}))
        except UnsupportedToolError as exc:
            logger.warning("Rejected unsupported function: %s", function_name)
            return ToolResult(error=str(exc))
        except ToolExecutionError as exc:
            logger.warning("Function %s failed: %s", function_name, exc.__cause__ or exc)
            return ToolResult(error=str(exc))
        logger.debug("Function %s completed in %.1f ms", trace.name, trace.latency_ms)
        return ToolResult(payload=payload, trace=trace)
