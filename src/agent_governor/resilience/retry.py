"""Retry-with-backoff for asynchronous operations."""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, TypeVar

from agent_governor._callbacks import fire_callbacks
from agent_governor.exceptions import OperationAborted, TransientError
from agent_governor.observability.events import RetryScheduled

if TYPE_CHECKING:
    from agent_governor.resilience.cancellation import CancellationToken

logger = logging.getLogger(__name__)

T = TypeVar("T")

ErrorMatcher = re.Pattern[str] | str | type[BaseException] | Callable[[Exception], bool]

_RETRYABLE_MARKERS = (
    "timeout",
    "rate limit",
    "429",
    "503",
    "connection reset",
    "econnreset",
    "network error",
)


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Immutable retry configuration applied per call site.

    Matchers are checked in order; the first match makes the error
    retryable.  A regex string or compiled pattern is searched in
    ``str(error)``, an exception class matches by ``isinstance`` and any
    other callable is used as a predicate.

    Parameters:
        max_retries: Retries after the first attempt; ``0`` means a
            single attempt.
        initial_delay_ms: Delay before the first retry; doubles on each
            subsequent retry.
        retryable_errors: Ordered matchers.  Defaults to match-all.
        respect_retry_after: Wait at least ``retry_delay_for(error)`` when
            it exceeds the exponential delay.
    """

    max_retries: int = 3
    initial_delay_ms: float = 1000.0
    retryable_errors: tuple[ErrorMatcher, ...] = field(default=(".*",))
    respect_retry_after: bool = False

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            msg = "max_retries must be >= 0"
            raise ValueError(msg)
        if self.initial_delay_ms < 0:
            msg = "initial_delay_ms must be >= 0"
            raise ValueError(msg)
        compiled = tuple(
            re.compile(m) if isinstance(m, str) else m for m in self.retryable_errors
        )
        object.__setattr__(self, "retryable_errors", compiled)

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def is_retryable(self, error: Exception) -> bool:
        """Return whether any matcher accepts ``error``."""
        for matcher in self.retryable_errors:
            if isinstance(matcher, re.Pattern):
                if matcher.search(str(error)):
                    return True
            elif isinstance(matcher, type):
                if isinstance(error, matcher):
                    return True
            elif matcher(error):
                return True
        return False

    def delay_ms(self, attempt: int, error: Exception | None = None) -> float:
        """Backoff before retrying after ``attempt`` (zero-based) failed."""
        delay = self.initial_delay_ms * (2**attempt)
        if self.respect_retry_after and error is not None:
            delay = max(delay, retry_delay_for(error))
        return delay


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy | None = None,
    *,
    operation_name: str = "operation",
    observers: Sequence[Any] = (),
    cancel_token: CancellationToken | None = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> T:
    """Run ``operation``, retrying matched failures with exponential backoff.

    Non-retryable errors propagate immediately without delay.  When the
    attempts run out the last error propagates unchanged.

    Parameters:
        operation: Zero-argument coroutine factory; called once per attempt.
        policy: Retry configuration.  Defaults to ``RetryPolicy()``.
        operation_name: Label carried on ``RetryScheduled`` events.
        observers: Receive ``on_retry_scheduled`` before each delay.
        cancel_token: Optional ``CancellationToken`` checked before each
            attempt; a cancelled token raises ``OperationAborted``.
        sleep: Awaitable delay in seconds, injectable for tests.

    Raises:
        OperationAborted: If ``cancel_token`` fires between attempts.
    """
    policy = policy or RetryPolicy()
    for attempt in range(policy.max_attempts):
        if cancel_token is not None and cancel_token.cancelled:
            msg = f"{operation_name} aborted before attempt {attempt + 1}"
            raise OperationAborted(msg)
        try:
            return await operation()
        except OperationAborted:
            raise
        except Exception as exc:
            if not policy.is_retryable(exc) or attempt == policy.max_retries:
                raise
            delay = policy.delay_ms(attempt, exc)
            fire_callbacks(
                observers,
                "on_retry_scheduled",
                RetryScheduled(
                    operation=operation_name,
                    attempt=attempt + 1,
                    max_attempts=policy.max_attempts,
                    delay_ms=delay,
                    error=str(exc),
                    error_type=type(exc).__name__,
                ),
                logger=logger,
            )
            await sleep(delay / 1000)
    msg = "unreachable: retry loop exited without result"
    raise AssertionError(msg)


def is_retryable_error(error: Exception) -> bool:
    """Classify transient failures: ``TransientError`` or a known transient message."""
    if isinstance(error, TransientError):
        return True
    message = str(error).lower()
    return any(marker in message for marker in _RETRYABLE_MARKERS)


def retry_delay_for(error: Exception) -> float:
    """Suggested delay in milliseconds before retrying ``error``."""
    if isinstance(error, TransientError) and error.retry_after_ms:
        return error.retry_after_ms
    if "rate limit" in str(error).lower():
        return 60_000.0
    return 1000.0


def provider_retryable_errors() -> tuple[type[Exception], ...]:
    """Return the tuple of retryable Anthropic exception types.

    Returns an empty tuple when the ``anthropic`` package is not
    installed, so a policy built from it matches nothing provider-specific.
    """
    try:
        import anthropic
    except ImportError:
        return ()
    return (
        anthropic.RateLimitError,
        anthropic.APIConnectionError,
        anthropic.APITimeoutError,
    )
