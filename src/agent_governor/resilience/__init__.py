"""Resilience layer: retry, cancellation, recovery, stream handling and timeouts."""

from .cancellation import CancellationToken, abortable_stream
from .circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerConfig,
    CircuitBreakerRegistry,
    CircuitBreakerStats,
    CircuitState,
)
from .recovery import RecoveryStrategy, error_message_matches, execute_with_recovery
from .retry import (
    RetryPolicy,
    is_retryable_error,
    provider_retryable_errors,
    retry_delay_for,
    retry_with_backoff,
)
from .streams import StreamHandlers, handle_stream_with_errors
from .timeout import run_with_timeout

__all__ = [
    "CancellationToken",
    "CircuitBreaker",
    "CircuitBreakerConfig",
    "CircuitBreakerRegistry",
    "CircuitBreakerStats",
    "CircuitState",
    "RecoveryStrategy",
    "RetryPolicy",
    "StreamHandlers",
    "abortable_stream",
    "error_message_matches",
    "execute_with_recovery",
    "handle_stream_with_errors",
    "is_retryable_error",
    "provider_retryable_errors",
    "retry_delay_for",
    "retry_with_backoff",
    "run_with_timeout",
]
