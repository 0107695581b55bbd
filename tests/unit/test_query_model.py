import json

import pytest
from pydantic import ValidationError

from care_assistant.types import Answer, AnswerSource, Query, ToolResult


@pytest.mark.parametrize("text", ["", "   ", "\n\t", "x" * 1001])
def test_query_rejects_blank_or_oversized_text(text) -> None:
    with pytest.raises(ValidationError):
        Query(text=text)


def test_query_accepts_upper_bound_and_is_frozen() -> None:
    query = Query(text="x" * 1000, session_id="s-1")

    assert query.context == {}
    with pytest.raises(ValidationError):
        query.text = "changed"


def test_answer_normalizes_payload_into_records() -> None:
    single = Answer.success("ok", AnswerSource.REMOTE, data={"facilityCount": 7})
    many = Answer.success("ok", AnswerSource.RULE_BASED, data=[{"id": 1}, {"id": 2}])
    empty = Answer.success("ok", AnswerSource.RULE_BASED)

    assert single.data == ({"facilityCount": 7},)
    assert many.data == ({"id": 1}, {"id": 2})
    assert empty.data is None
    assert single.is_error is False


def test_answer_failure_and_transport_shape() -> None:
    answer = Answer.failure("sorry")
    payload = answer.to_dict()

    assert answer.is_error is True
    assert payload["source"] == "ERROR"
    assert payload["isError"] is True
    assert payload["data"] is None
    assert "T" in payload["timestamp"]


def test_answer_metadata_and_records_are_read_only() -> None:
    source_metadata = {"provider": "Rule-Based Service"}
    source_record = {"id": 1}
    answer = Answer.success(
        "ok", AnswerSource.RULE_BASED, data=[source_record], metadata=source_metadata
    )
    source_metadata["provider"] = "changed"
    source_record["id"] = 2

    with pytest.raises(TypeError):
        answer.metadata["provider"] = "other"
    with pytest.raises(TypeError):
        answer.data[0]["id"] = 3

    assert answer.metadata == {"provider": "Rule-Based Service"}
    assert answer.data == ({"id": 1},)
    assert json.loads(json.dumps(answer.to_dict()))["data"] == [{"id": 1}]


def test_tool_result_content() -> None:
    assert ToolResult(payload={"patientCount": 4}).to_content() == '{"patientCount": 4}'
    assert ToolResult(error="boom").to_content() == '{"error": "boom"}'
    assert ToolResult(error="boom").ok is False
