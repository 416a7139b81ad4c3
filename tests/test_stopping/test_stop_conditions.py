"""Tests for agent_governor.stopping.conditions."""

from __future__ import annotations

import pytest

from agent_governor.models.run_state import StoppingConfig
from agent_governor.stopping.conditions import create_stop_when, estimate_usage_cost
from agent_governor.stopping.manager import StoppingConditionManager


class TestCreateStopWhen:
    """The per-step hook counts the step before checking."""

    def test_counts_steps_and_stops(self) -> None:
        manager = StoppingConditionManager(StoppingConfig(max_steps=2))
        stop_when = create_stop_when(manager)

        assert stop_when() is False
        assert stop_when() is True
        assert manager.stats().step_count == 2

    def test_other_conditions_also_stop(self) -> None:
        manager = StoppingConditionManager(StoppingConfig(max_tokens=10))
        manager.add_tokens(10)
        assert create_stop_when(manager)() is True


class TestEstimateUsageCost:
    """Per-call cost estimate from token usage."""

    def test_default_prices(self) -> None:
        assert estimate_usage_cost(1000, 1000) == pytest.approx(0.04)

    def test_custom_prices(self) -> None:
        cost = estimate_usage_cost(2000, 500, input_per_1k=0.003, output_per_1k=0.015)
        assert cost == pytest.approx(0.0135)

    def test_zero_usage(self) -> None:
        assert estimate_usage_cost(0, 0) == 0

    def test_negative_tokens_rejected(self) -> None:
        with pytest.raises(ValueError):
            estimate_usage_cost(-1, 0)
