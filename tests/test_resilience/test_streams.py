"""Tests for agent_governor.resilience.streams."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any

import pytest

from agent_governor.exceptions import OperationAborted
from agent_governor.models.streaming import DataChunk, ErrorChunk
from agent_governor.resilience.streams import StreamHandlers, handle_stream_with_errors


async def _stream(*chunks: Any) -> AsyncIterator[Any]:
    for chunk in chunks:
        yield chunk


class _Recorder:
    def __init__(self) -> None:
        self.data: list[Any] = []
        self.errors: list[BaseException] = []
        self.aborts = 0
        self.tool_errors: list[tuple[BaseException, str]] = []

    def handlers(self) -> StreamHandlers:
        return StreamHandlers(
            on_error=self.errors.append,
            on_abort=self._abort,
            on_tool_error=lambda e, name: self.tool_errors.append((e, name)),
        )

    def _abort(self) -> None:
        self.aborts += 1


class TestChunkRouting:
    """Each chunk kind reaches exactly one handler."""

    @pytest.mark.asyncio()
    async def test_mixed_stream(self) -> None:
        rec = _Recorder()
        failure = RuntimeError("provider error")
        tool_failure = RuntimeError("grep failed")
        await handle_stream_with_errors(
            _stream(
                {"type": "text-delta", "text": "Hel"},
                {"type": "error", "error": failure},
                {"type": "tool-error", "error": tool_failure, "toolName": "grep"},
                "lo",
                {"type": "abort"},
            ),
            rec.data.append,
            rec.handlers(),
        )
        assert rec.data == [{"type": "text-delta", "text": "Hel"}, "lo"]
        assert rec.errors == [failure]
        assert rec.tool_errors == [(tool_failure, "grep")]
        assert rec.aborts == 1

    @pytest.mark.asyncio()
    async def test_abort_chunk_ends_consumption(self) -> None:
        rec = _Recorder()
        await handle_stream_with_errors(
            _stream(
                "before",
                {"type": "abort"},
                "after",
                {"type": "error", "error": KeyError()},
            ),
            rec.data.append,
            rec.handlers(),
        )
        assert rec.data == ["before"]
        assert rec.aborts == 1
        assert rec.errors == []

    @pytest.mark.asyncio()
    async def test_tagged_chunks_pass_through(self) -> None:
        rec = _Recorder()
        failure = ValueError("bad")
        await handle_stream_with_errors(
            _stream(DataChunk("a"), ErrorChunk(failure)), rec.data.append, rec.handlers()
        )
        assert rec.data == ["a"]
        assert rec.errors == [failure]

    @pytest.mark.asyncio()
    async def test_missing_handler_drops_chunk(self) -> None:
        data: list[Any] = []
        await handle_stream_with_errors(
            _stream(
                {"type": "tool-error", "error": KeyError("k"), "toolName": "ls"},
                {"type": "text", "text": "x"},
            ),
            data.append,
        )
        assert data == [{"type": "text", "text": "x"}]

    @pytest.mark.asyncio()
    async def test_abort_without_handler_still_stops(self) -> None:
        data: list[Any] = []
        await handle_stream_with_errors(
            _stream({"type": "abort"}, {"type": "text", "text": "x"}), data.append
        )
        assert data == []

    @pytest.mark.asyncio()
    async def test_async_handlers_are_awaited(self) -> None:
        seen: list[Any] = []

        async def on_data(value: Any) -> None:
            seen.append(value)

        await handle_stream_with_errors(_stream(1, 2), on_data)
        assert seen == [1, 2]


class TestIterationFailures:
    """Exceptions raised by the stream itself are routed, not raised."""

    @pytest.mark.asyncio()
    async def test_iteration_error_goes_to_error_handler(self) -> None:
        async def broken() -> AsyncIterator[Any]:
            yield "first"
            raise ConnectionError("socket closed")

        rec = _Recorder()
        await handle_stream_with_errors(broken(), rec.data.append, rec.handlers())
        assert rec.data == ["first"]
        assert len(rec.errors) == 1
        assert isinstance(rec.errors[0], ConnectionError)

    @pytest.mark.asyncio()
    async def test_aborted_iteration_goes_to_abort_handler(self) -> None:
        async def cancelled() -> AsyncIterator[Any]:
            yield "x"
            raise OperationAborted("user cancelled")

        rec = _Recorder()
        await handle_stream_with_errors(cancelled(), rec.data.append, rec.handlers())
        assert rec.data == ["x"]
        assert rec.aborts == 1
        assert rec.errors == []

    @pytest.mark.asyncio()
    async def test_iteration_error_without_handler_is_contained(self) -> None:
        async def broken() -> AsyncIterator[Any]:
            raise ConnectionError("socket closed")
            yield  # pragma: no cover

        await handle_stream_with_errors(broken(), lambda value: None)
