"""Tests for agent_governor.models.defaults."""

from __future__ import annotations

from agent_governor.exceptions import TransientError
from agent_governor.models.defaults import (
    default_retry_policy,
    default_stopping_config,
    provider_retry_policy,
    transient_retry_policy,
)


class TestDefaultFactories:
    """Factory helpers return the documented defaults."""

    def test_stopping_defaults(self) -> None:
        config = default_stopping_config()
        assert config.max_steps == 20
        assert config.max_tokens == 100_000
        assert config.max_cost == 1.0
        assert config.time_limit_ms == 300_000
        assert config.error_threshold == 5

    def test_retry_defaults(self) -> None:
        policy = default_retry_policy()
        assert policy.max_retries == 3
        assert policy.initial_delay_ms == 1000
        assert policy.is_retryable(ValueError("anything"))

    def test_transient_policy_filters(self) -> None:
        policy = transient_retry_policy()
        assert policy.is_retryable(RuntimeError("HTTP 503"))
        assert policy.is_retryable(TransientError("flaky"))
        assert not policy.is_retryable(ValueError("invalid"))
        assert policy.delay_ms(0, RuntimeError("rate limit")) == 60_000

    def test_provider_policy_covers_transient_errors(self) -> None:
        policy = provider_retry_policy(max_retries=1)
        assert policy.max_attempts == 2
        assert policy.is_retryable(TransientError("flaky"))
        assert not policy.is_retryable(KeyError("x"))
