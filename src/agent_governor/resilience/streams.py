"""Error-aware consumption of model response streams."""

from __future__ import annotations

import inspect
import logging
from collections.abc import AsyncIterable, Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from agent_governor.exceptions import OperationAborted
from agent_governor.models.streaming import (
    AbortChunk,
    DataChunk,
    ErrorChunk,
    ToolErrorChunk,
    classify_chunk,
)

logger = logging.getLogger(__name__)

Handler = Callable[..., Awaitable[Any] | Any]


@dataclass(frozen=True, slots=True)
class StreamHandlers:
    """Dedicated handlers for non-data chunks.

    Each handler may be sync or async and is optional; a chunk whose
    handler is missing is dropped, never passed to the data handler.
    """

    on_error: Callable[[BaseException], Awaitable[Any] | Any] | None = None
    on_abort: Callable[[], Awaitable[Any] | Any] | None = None
    on_tool_error: Callable[[BaseException, str], Awaitable[Any] | Any] | None = None


async def _call(handler: Handler | None, *args: Any) -> None:
    if handler is None:
        return
    result = handler(*args)
    if inspect.isawaitable(result):
        await result


async def handle_stream_with_errors(
    stream: AsyncIterable[Any],
    on_data: Handler,
    handlers: StreamHandlers | None = None,
) -> None:
    """Consume ``stream``, routing each chunk by its tagged kind.

    Error, abort and tool-error chunks go to their dedicated handlers;
    only data chunks reach ``on_data``, which receives the chunk's value.
    Raw chunks are classified once with ``classify_chunk``.  An abort
    chunk ends consumption.  An ``OperationAborted`` raised while
    iterating goes to ``handlers.on_abort``; any other exception raised
    while iterating (or by ``on_data``) is routed to ``handlers.on_error``
    instead of propagating.
    """
    handlers = handlers or StreamHandlers()
    try:
        async for raw in stream:
            chunk = classify_chunk(raw)
            if isinstance(chunk, ErrorChunk):
                await _call(handlers.on_error, chunk.error)
            elif isinstance(chunk, AbortChunk):
                logger.debug("Stream aborted: %s", chunk.reason)
                await _call(handlers.on_abort)
                return
            elif isinstance(chunk, ToolErrorChunk):
                await _call(handlers.on_tool_error, chunk.error, chunk.tool_name)
            elif isinstance(chunk, DataChunk):
                await _call(on_data, chunk.value)
    except OperationAborted:
        await _call(handlers.on_abort)
    except Exception as exc:
        if handlers.on_error is None:
            logger.warning("Stream failed with no error handler registered", exc_info=True)
            return
        await _call(handlers.on_error, exc)
