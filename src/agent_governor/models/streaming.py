"""Tagged stream chunks for model response streams.

The chunk kind is decided once, when the chunk is produced (or by
``classify_chunk`` at the provider boundary), so consumers dispatch on
the variant type instead of probing optional fields.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, TypeAlias


@dataclass(frozen=True, slots=True)
class DataChunk:
    """Ordinary payload (text delta, tool call, usage, ...)."""

    value: Any


@dataclass(frozen=True, slots=True)
class ErrorChunk:
    """The provider reported a failure inside the stream."""

    error: BaseException


@dataclass(frozen=True, slots=True)
class AbortChunk:
    """The stream was aborted cooperatively."""

    reason: str | None = None


@dataclass(frozen=True, slots=True)
class ToolErrorChunk:
    """A single tool call failed; the stream itself continues."""

    error: BaseException
    tool_name: str


StreamChunk: TypeAlias = DataChunk | ErrorChunk | AbortChunk | ToolErrorChunk

_TAGGED = (DataChunk, ErrorChunk, AbortChunk, ToolErrorChunk)


def classify_chunk(raw: Any) -> StreamChunk:
    """Convert a raw provider chunk into a tagged variant.

    Raw chunks are mappings with a ``type`` key.  An ``"error"`` chunk
    without an exception, or a ``"tool-error"`` chunk missing either the
    exception or the tool name, is treated as data.  Already-tagged
    chunks pass through unchanged.
    """
    if isinstance(raw, _TAGGED):
        return raw
    if not isinstance(raw, Mapping):
        return DataChunk(raw)

    kind = raw.get("type")
    error = raw.get("error")
    if kind == "error" and isinstance(error, BaseException):
        return ErrorChunk(error)
    if kind == "abort":
        reason = raw.get("reason")
        return AbortChunk(reason if isinstance(reason, str) else None)
    tool_name = raw.get("tool_name", raw.get("toolName"))
    if kind == "tool-error" and isinstance(error, BaseException) and tool_name:
        return ToolErrorChunk(error, str(tool_name))
    return DataChunk(raw)
