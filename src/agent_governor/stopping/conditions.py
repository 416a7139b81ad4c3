"""Helpers that feed and consult a ``StoppingConditionManager``."""

from __future__ import annotations

from collections.abc import Callable

from agent_governor.stopping.manager import StoppingConditionManager


def create_stop_when(manager: StoppingConditionManager) -> Callable[[], bool]:
    """Build a per-step hook: count the step, then report whether to stop.

    Suitable for agent loops that accept a ``stop_when`` callback invoked
    once after every step.
    """

    def stop_when() -> bool:
        manager.increment_step()
        return manager.should_stop().stop

    return stop_when


def estimate_usage_cost(
    input_tokens: int,
    output_tokens: int,
    input_per_1k: float = 0.01,
    output_per_1k: float = 0.03,
) -> float:
    """Rough currency cost of one model call, for ``add_cost``.

    Parameters:
        input_tokens: Prompt tokens consumed.
        output_tokens: Completion tokens produced.
        input_per_1k: Price per 1,000 input tokens.
        output_per_1k: Price per 1,000 output tokens.
    """
    if input_tokens < 0 or output_tokens < 0:
        msg = "token counts must be non-negative"
        raise ValueError(msg)
    return (input_tokens * input_per_1k + output_tokens * output_per_1k) / 1000
