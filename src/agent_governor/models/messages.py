"""Conversation message models.

A ``Message`` carries either plain text or an ordered list of typed
parts.  Dict parts whose ``type`` names a known part are coerced into
the matching model on validation; any other part shape is kept as-is
and costed by its serialized form.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Literal, TypeAlias

from pydantic import BaseModel, Field, field_validator, model_validator

from agent_governor.exceptions import HistoryValidationError

Role: TypeAlias = Literal["system", "user", "assistant", "tool"]


class TextPart(BaseModel):
    """A plain-text segment of a message."""

    type: Literal["text"] = "text"
    text: str


class ToolCallPart(BaseModel):
    """A tool invocation emitted by the assistant."""

    type: Literal["tool-call"] = "tool-call"
    tool_call_id: str
    tool_name: str
    args: Any = None


class ToolResultPart(BaseModel):
    """The value returned by a tool, linked to its invocation by id."""

    type: Literal["tool-result"] = "tool-result"
    tool_call_id: str
    tool_name: str = ""
    value: Any = None


ContentPart: TypeAlias = TextPart | ToolCallPart | ToolResultPart

PART_MODELS: dict[str, type[BaseModel]] = {
    "text": TextPart,
    "tool-call": ToolCallPart,
    "tool-result": ToolResultPart,
}


class Message(BaseModel):
    """One turn of the conversation.

    A ``tool`` message must carry at least one ``ToolResultPart``.
    """

    role: Role
    content: str | list[Any] = Field(default="")

    @field_validator("content", mode="before")
    @classmethod
    def _coerce_parts(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return value
        parts: list[Any] = []
        for part in value:
            if isinstance(part, dict) and isinstance(part.get("type"), str):
                model = PART_MODELS.get(part["type"])
                if model is not None:
                    part = model.model_validate(part)
            parts.append(part)
        return parts

    @model_validator(mode="after")
    def _tool_message_has_result(self) -> Message:
        if self.role == "tool" and not self.tool_results:
            msg = "A tool message must carry at least one tool-result part"
            raise ValueError(msg)
        return self

    @property
    def parts(self) -> list[Any]:
        """Content as a list of parts; plain text becomes a single ``TextPart``."""
        if isinstance(self.content, str):
            return [TextPart(text=self.content)]
        return list(self.content)

    @property
    def tool_calls(self) -> list[ToolCallPart]:
        if isinstance(self.content, str):
            return []
        return [p for p in self.content if isinstance(p, ToolCallPart)]

    @property
    def tool_results(self) -> list[ToolResultPart]:
        if isinstance(self.content, str):
            return []
        return [p for p in self.content if isinstance(p, ToolResultPart)]


def validate_history(history: Sequence[Message]) -> None:
    """Check that every tool result references an earlier tool invocation.

    This is an explicit check for producers of history; the trimmer and
    estimator never call it and accept any sequence as given.

    Raises:
        HistoryValidationError: On the first tool result whose
            ``tool_call_id`` was not issued by a preceding message.
    """
    seen_ids: set[str] = set()
    for index, message in enumerate(history):
        for result in message.tool_results:
            if result.tool_call_id not in seen_ids:
                msg = (
                    f"Message {index} references unknown tool call "
                    f"{result.tool_call_id!r}"
                )
                raise HistoryValidationError(
                    msg,
                    code="orphan_tool_result",
                    details={"index": index, "tool_call_id": result.tool_call_id},
                )
        seen_ids.update(call.tool_call_id for call in message.tool_calls)
