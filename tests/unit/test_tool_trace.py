from pydantic import BaseModel

from care_assistant.agent.dispatcher import ToolDispatcher
from care_assistant.agent.registry import ToolRegistry, ToolSpec


class EchoInput(BaseModel):
    text: str


def test_tool_trace_captures_latency_and_payload() -> None:
    registry = ToolRegistry()

    def _handler(data: EchoInput) -> dict[str, str]:
        return {"text": data.text.upper()}

    registry.register(
        ToolSpec(
            name="echo",
            description="uppercase",
            args_schema=EchoInput,
            handler=_handler,
        )
    )

    result, trace = registry.execute("echo", {"text": "hello"})

    assert result == {"text": "HELLO"}
    assert trace.name == "echo"
    assert trace.input_payload == {"text": "hello"}
    assert trace.output_preview == '{"text": "HELLO"}'
    assert trace.latency_ms >= 0.0


def test_dispatcher_result_carries_trace(store) -> None:
    dispatcher = ToolDispatcher.for_data(store)

    ok = dispatcher.execute("get_facility_count", {})
    failed = dispatcher.execute("unknown_tool", {})

    assert ok.trace is not None
    assert ok.trace.name == "get_facility_count"
    assert ok.trace.output_preview == '{"facilityCount": 4}'
    assert failed.trace is None
