"""Recovery strategies: repair a failure, then re-attempt the operation."""

from __future__ import annotations

import inspect
import logging
import re
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

from agent_governor._callbacks import fire_callbacks
from agent_governor.exceptions import OperationAborted
from agent_governor.observability.events import RecoveryAttempted

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class RecoveryStrategy:
    """A predicate/action pair that repairs a failure condition before a retry.

    ``recover`` receives the error being repaired.  It may be a plain
    function or a coroutine function; its result is awaited when it is
    awaitable.
    """

    should_recover: Callable[[Exception], bool]
    recover: Callable[[Exception], Awaitable[Any] | Any]
    name: str = "recovery"


def error_message_matches(pattern: str | re.Pattern[str]) -> Callable[[Exception], bool]:
    """Build a predicate that searches ``pattern`` (case-insensitive) in ``str(error)``."""
    regex = re.compile(pattern, re.IGNORECASE) if isinstance(pattern, str) else pattern

    def _matches(error: Exception) -> bool:
        return regex.search(str(error)) is not None

    return _matches


async def execute_with_recovery(
    operation: Callable[[], Awaitable[T]],
    strategies: Sequence[RecoveryStrategy],
    *,
    max_recoveries: int | None = None,
    observers: Sequence[Any] = (),
) -> T:
    """Run ``operation``, recovering and re-attempting until it succeeds.

    On failure the strategies are scanned in order; the first whose
    predicate matches has its recovery action run (and awaited) with the
    error, then the operation is attempted again.  A recovery action that
    raises is logged and the scan moves on to the next matching strategy.
    When no strategy matches, or every matching recovery fails, the
    original error propagates.

    The loop is unbounded unless ``max_recoveries`` is given, in which
    case the error that would trigger one recovery too many propagates.
    Callers without a cap are expected to bound it externally, e.g. by
    the session's error threshold.

    Raises:
        OperationAborted: Always propagated; cancellation is never
            treated as a recoverable failure.
    """
    if max_recoveries is not None and max_recoveries < 0:
        msg = "max_recoveries must be >= 0"
        raise ValueError(msg)

    recoveries = 0
    while True:
        try:
            return await operation()
        except OperationAborted:
            raise
        except Exception as exc:
            recovered = False
            for strategy in strategies:
                if not strategy.should_recover(exc):
                    continue
                if max_recoveries is not None and recoveries >= max_recoveries:
                    raise
                recoveries += 1
                fire_callbacks(
                    observers,
                    "on_recovery_attempted",
                    RecoveryAttempted(
                        strategy=strategy.name,
                        attempt=recoveries,
                        error=str(exc),
                        error_type=type(exc).__name__,
                    ),
                    logger=logger,
                )
                try:
                    result = strategy.recover(exc)
                    if inspect.isawaitable(result):
                        await result
                except OperationAborted:
                    raise
                except Exception:
                    logger.warning("Recovery %r failed", strategy.name, exc_info=True)
                    continue
                recovered = True
                break
            if not recovered:
                raise
