"""Stopping thresholds, run statistics and stop decisions."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class StopCondition(StrEnum):
    """Thresholds, listed in the order ``should_stop`` evaluates them."""

    STEPS = "steps"
    TOKENS = "tokens"
    COST = "cost"
    TIME = "time"
    ERRORS = "errors"


class StoppingConfig(BaseModel):
    """Per-session stopping thresholds.

    Omitted fields take the session defaults; an explicit ``None``
    disables that threshold.  Each threshold is enforced independently.
    """

    model_config = ConfigDict(frozen=True)

    max_steps: int | None = Field(default=20, gt=0)
    max_tokens: int | None = Field(default=100_000, gt=0)
    max_cost: float | None = Field(default=1.0, gt=0)
    time_limit_ms: float | None = Field(default=300_000, gt=0)
    error_threshold: int | None = Field(default=5, gt=0)


class RunStats(BaseModel):
    """Read-only snapshot of a session's counters."""

    model_config = ConfigDict(frozen=True)

    step_count: int = 0
    token_count: int = 0
    estimated_cost: float = 0.0
    error_count: int = 0
    elapsed_ms: float = 0.0
    config: StoppingConfig = Field(default_factory=StoppingConfig)


class StopDecision(BaseModel):
    """Outcome of a stop check, consumed once per completed step."""

    model_config = ConfigDict(frozen=True)

    stop: bool
    reason: str | None = None
    condition: StopCondition | None = None


class CriteriaResult(BaseModel):
    """Outcome of the optional success-criteria check."""

    model_config = ConfigDict(frozen=True)

    met: bool
    details: str
