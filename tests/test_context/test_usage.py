"""Tests for agent_governor.context.usage."""

from __future__ import annotations

from types import SimpleNamespace

from agent_governor.context.usage import DISPLAY_FALLBACK_CONTEXT, context_usage_percent
from agent_governor.models.budget import ModelBudget


class TestContextUsagePercent:
    """Display-only usage figure."""

    def test_uses_model_capacity(self) -> None:
        assert context_usage_percent(50_000, ModelBudget(context=200_000)) == 25

    def test_float_capacity(self) -> None:
        assert context_usage_percent(50_000, {"context": 200000.0}) == 25

    def test_rounds_to_nearest(self) -> None:
        assert context_usage_percent(1, {"context": 3}) == 33

    def test_clamped_to_100(self) -> None:
        assert context_usage_percent(500, {"context": 100}) == 100

    def test_missing_capacity_falls_back(self) -> None:
        assert DISPLAY_FALLBACK_CONTEXT == 128_000
        assert context_usage_percent(64_000, {"name": "unknown"}) == 50

    def test_invalid_capacity_falls_back(self) -> None:
        assert context_usage_percent(12_800, SimpleNamespace(context="lots")) == 10

    def test_no_descriptor_falls_back(self) -> None:
        assert context_usage_percent(0) == 0
