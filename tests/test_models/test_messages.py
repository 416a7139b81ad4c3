"""Tests for agent_governor.models.messages."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from agent_governor.exceptions import HistoryValidationError
from agent_governor.models.messages import (
    Message,
    TextPart,
    ToolCallPart,
    ToolResultPart,
    validate_history,
)


def _call(call_id: str = "c1") -> Message:
    return Message(
        role="assistant",
        content=[ToolCallPart(tool_call_id=call_id, tool_name="search", args={"q": "x"})],
    )


def _result(call_id: str = "c1") -> Message:
    return Message(
        role="tool",
        content=[ToolResultPart(tool_call_id=call_id, tool_name="search", value=["hit"])],
    )


class TestMessage:
    """Message construction and part coercion."""

    def test_plain_text(self) -> None:
        message = Message(role="user", content="hello")
        assert message.parts == [TextPart(text="hello")]
        assert message.tool_calls == []

    def test_dict_parts_are_coerced(self) -> None:
        message = Message.model_validate(
            {
                "role": "assistant",
                "content": [
                    {"type": "text", "text": "Let me look."},
                    {"type": "tool-call", "tool_call_id": "c1", "tool_name": "search"},
                ],
            }
        )
        assert isinstance(message.content[0], TextPart)
        assert message.tool_calls[0].tool_name == "search"

    def test_unknown_parts_are_kept(self) -> None:
        part = {"type": "image", "url": "http://img"}
        message = Message(role="user", content=[part])
        assert message.content == [part]

    def test_unhashable_type_field_is_kept(self) -> None:
        part = {"type": ["not", "a", "tag"]}
        assert Message(role="user", content=[part]).content == [part]

    def test_tool_message_requires_result(self) -> None:
        with pytest.raises(ValidationError, match="tool-result"):
            Message(role="tool", content="plain text")

    def test_unknown_role_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Message(role="narrator", content="x")  # type: ignore[arg-type]

    def test_json_round_trip_keeps_part_types(self) -> None:
        message = _result()
        restored = Message.model_validate_json(message.model_dump_json())
        assert restored.tool_results == message.tool_results


class TestValidateHistory:
    """Tool results must reference earlier tool calls."""

    def test_valid_history(self) -> None:
        validate_history([Message(role="user", content="find x"), _call(), _result()])

    def test_orphan_result(self) -> None:
        with pytest.raises(HistoryValidationError) as exc_info:
            validate_history([_call("c1"), _result("c2")])
        assert exc_info.value.code == "orphan_tool_result"
        assert exc_info.value.details == {"index": 1, "tool_call_id": "c2"}

    def test_result_before_call_is_orphan(self) -> None:
        with pytest.raises(HistoryValidationError):
            validate_history([_result("c1"), _call("c1")])
