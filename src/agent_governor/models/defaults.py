"""Factory functions for the default session configuration."""

from __future__ import annotations

from agent_governor.models.run_state import StoppingConfig
from agent_governor.resilience.retry import (
    RetryPolicy,
    is_retryable_error,
    provider_retryable_errors,
)


def default_stopping_config() -> StoppingConfig:
    """20 steps, 100,000 tokens, 1.0 cost units, 5 minutes, 5 errors."""
    return StoppingConfig()


def default_retry_policy() -> RetryPolicy:
    """3 retries from 1000 ms, retrying every error."""
    return RetryPolicy()


def transient_retry_policy(max_retries: int = 3, initial_delay_ms: float = 1000.0) -> RetryPolicy:
    """Retry only errors that ``is_retryable_error`` classifies as transient.

    Rate-limit errors wait at least the delay suggested by
    ``retry_delay_for``.
    """
    return RetryPolicy(
        max_retries=max_retries,
        initial_delay_ms=initial_delay_ms,
        retryable_errors=(is_retryable_error,),
        respect_retry_after=True,
    )


def provider_retry_policy(max_retries: int = 3, initial_delay_ms: float = 1000.0) -> RetryPolicy:
    """Retry the Anthropic SDK's rate-limit, connection and timeout errors.

    Transient errors raised by this package are retried as well.  Without
    the ``anthropic`` package installed only the latter match.
    """
    return RetryPolicy(
        max_retries=max_retries,
        initial_delay_ms=initial_delay_ms,
        retryable_errors=(*provider_retryable_errors(), is_retryable_error),
        respect_retry_after=True,
    )
