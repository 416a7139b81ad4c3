"""Cooperative cancellation: a one-shot token with many observers."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import AsyncIterable, AsyncIterator, Callable
from typing import TypeVar

from agent_governor.exceptions import OperationAborted

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CancellationToken:
    """Single cancel source, many registered callbacks.

    ``cancel()`` fires every registered callback exactly once and leaves
    the token permanently cancelled; further calls are no-ops.  A
    callback registered after cancellation runs immediately, so there is
    no window in which a cancellation can be missed.

    ``cancel()`` may be called from any thread; ``wait()`` wakes its
    event loop thread-safely.
    """

    __slots__ = ("_callbacks", "_cancelled", "_lock", "_reason")

    def __init__(self) -> None:
        self._callbacks: list[Callable[[], None]] = []
        self._cancelled = False
        self._reason: str | None = None
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(cancelled={self._cancelled})"

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> str | None:
        return self._reason

    def cancel(self, reason: str | None = None) -> bool:
        """Request cancellation.

        Returns:
            ``True`` if this call cancelled the token, ``False`` if it
            was already cancelled.
        """
        with self._lock:
            if self._cancelled:
                return False
            self._cancelled = True
            self._reason = reason
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            _invoke(callback)
        return True

    def on_cancel(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register ``callback`` to run once on cancellation.

        Returns:
            A function that unregisters the callback if it has not run yet.
        """
        with self._lock:
            if not self._cancelled:
                self._callbacks.append(callback)
                return lambda: self._unregister(callback)
        _invoke(callback)
        return lambda: None

    def _unregister(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def raise_if_cancelled(self) -> None:
        """Raise ``OperationAborted`` if the token has been cancelled."""
        if self._cancelled:
            msg = self._reason or "Operation cancelled"
            raise OperationAborted(msg)

    async def wait(self) -> None:
        """Suspend until the token is cancelled."""
        if self._cancelled:
            return
        loop = asyncio.get_running_loop()
        waiter: asyncio.Future[None] = loop.create_future()

        def _wake() -> None:
            loop.call_soon_threadsafe(_resolve, waiter)

        unregister = self.on_cancel(_wake)
        try:
            await waiter
        finally:
            unregister()


def _resolve(waiter: asyncio.Future[None]) -> None:
    if not waiter.done():
        waiter.set_result(None)


def _invoke(callback: Callable[[], None]) -> None:
    try:
        callback()
    except Exception:
        logger.warning("Cancellation callback %r failed", callback, exc_info=True)


async def abortable_stream(
    stream: AsyncIterable[T], token: CancellationToken
) -> AsyncIterator[T]:
    """Yield from ``stream`` until ``token`` is cancelled.

    The token is checked before requesting each element and again before
    yielding it.  Once cancellation is observed the sequence ends without
    error and the source is closed, discarding anything it had buffered.
    """
    iterator = aiter(stream)
    try:
        while not token.cancelled:
            try:
                item = await anext(iterator)
            except StopAsyncIteration:
                return
            if token.cancelled:
                return
            yield item
    finally:
        aclose = getattr(iterator, "aclose", None)
        if aclose is not None:
            await aclose()
