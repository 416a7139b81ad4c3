"""Stopping conditions: per-session thresholds and success criteria."""

from .conditions import create_stop_when, estimate_usage_cost
from .manager import StoppingConditionManager, SuccessCheck

__all__ = [
    "StoppingConditionManager",
    "SuccessCheck",
    "create_stop_when",
    "estimate_usage_cost",
]
