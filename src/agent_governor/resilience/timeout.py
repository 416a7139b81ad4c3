"""Race a bounded operation against a timer."""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Awaitable, Callable
from typing import TypeVar

from agent_governor.exceptions import OperationTimeoutError

T = TypeVar("T")


def _consume_result(task: asyncio.Future[object]) -> None:
    # Retrieve the abandoned task's outcome so it is never reported as unhandled.
    with contextlib.suppress(asyncio.CancelledError, Exception):
        task.exception()


async def run_with_timeout(
    operation: Callable[[], Awaitable[T]],
    timeout_ms: float,
) -> T:
    """Return the operation's result if it finishes within ``timeout_ms``.

    Whichever of the operation and the timer completes first wins.  On
    timeout the operation's task is asked to cancel but not awaited; its
    cleanup happens in the background and is not guaranteed.

    Raises:
        OperationTimeoutError: If the timer wins.
    """
    if timeout_ms <= 0:
        msg = "timeout_ms must be positive"
        raise ValueError(msg)

    task = asyncio.ensure_future(operation())
    try:
        done, _ = await asyncio.wait({task}, timeout=timeout_ms / 1000)
    except asyncio.CancelledError:
        task.cancel()
        raise
    if task in done:
        return task.result()

    task.add_done_callback(_consume_result)
    task.cancel()
    msg = f"Operation timed out after {timeout_ms:g}ms"
    raise OperationTimeoutError(msg, details={"timeout_ms": timeout_ms})
