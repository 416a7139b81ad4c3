"""Structured decision events emitted by governor components.

Each event carries enough fields to reconstruct why the decision was
made.  Events are immutable and JSON-serializable via ``model_dump``.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class GovernorEvent(BaseModel):
    """Common fields for every event."""

    model_config = ConfigDict(frozen=True)

    kind: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class HistoryTrimmed(GovernorEvent):
    """The context window trimmer evicted one or more messages."""

    kind: Literal["history_trimmed"] = "history_trimmed"
    old_count: int
    new_count: int
    tokens_freed: int
    tokens_before: int
    tokens_after: int
    safe_limit: float
    over_budget: bool = False


class StopConditionMet(GovernorEvent):
    """A stopping threshold was breached."""

    kind: Literal["stop_condition_met"] = "stop_condition_met"
    condition: str
    reason: str
    current: float
    limit: float


class RecoveryAttempted(GovernorEvent):
    """A recovery strategy matched a failure and is about to run."""

    kind: Literal["recovery_attempted"] = "recovery_attempted"
    strategy: str
    attempt: int
    error: str
    error_type: str


class RetryScheduled(GovernorEvent):
    """A retryable failure will be retried after ``delay_ms``."""

    kind: Literal["retry_scheduled"] = "retry_scheduled"
    operation: str
    attempt: int
    max_attempts: int
    delay_ms: float
    error: str
    error_type: str


class CircuitStateChanged(GovernorEvent):
    """A circuit breaker moved between CLOSED, OPEN and HALF_OPEN."""

    kind: Literal["circuit_state_changed"] = "circuit_state_changed"
    name: str
    previous: str
    current: str
    failure_count: int
