import pytest
from pydantic import BaseModel, Field, ValidationError

from care_assistant.agent.registry import ToolRegistry, ToolSpec
from care_assistant.errors import ToolExecutionError, UnsupportedToolError


class EchoInput(BaseModel):
    value: int = Field(ge=1)


def _echo_spec() -> ToolSpec:
    def _handler(data: EchoInput) -> dict[str, int]:
        return {"value": data.value}

    return ToolSpec(
        name="echo",
        description="echo positive int",
        args_schema=EchoInput,
        handler=_handler,
    )


def test_tool_registry_validation() -> None:
    registry = ToolRegistry()
    registry.register(_echo_spec())

    output, _ = registry.execute("echo", {"value": 3})
    assert output == {"value": 3}

    with pytest.raises(ToolExecutionError) as exc_info:
        registry.execute("echo", {"value": 0})

    assert isinstance(exc_info.value.__cause__, ValidationError)
    assert str(exc_info.value).startswith("Error executing function:")


def test_duplicate_tool_registration_rejected() -> None:
    registry = ToolRegistry()
    spec = _echo_spec()

    registry.register(spec)
    with pytest.raises(ValueError):
        registry.register(spec)


def test_unknown_tool_raises_unsupported() -> None:
    registry = ToolRegistry()

    with pytest.raises(UnsupportedToolError) as exc_info:
        registry.execute("missing", {})

    assert str(exc_info.value) == "Function not implemented: missing"


def test_langchain_export_keeps_names_and_executes() -> None:
    registry = ToolRegistry()
    registry.register(_echo_spec())

    (tool,) = registry.as_langchain_tools()

    assert tool.name == "echo"
    assert tool.invoke({"value": 2}) == {"value": 2}
