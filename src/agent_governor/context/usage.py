"""Display-only context usage figures."""

from __future__ import annotations

from typing import Any

from agent_governor.exceptions import ConfigurationError
from agent_governor.models.budget import ModelBudget

# Capacity assumed when a model descriptor has none.  Used for display
# only; trimming never falls back and raises ConfigurationError instead.
DISPLAY_FALLBACK_CONTEXT = 128_000


def context_usage_percent(total_tokens: int, descriptor: Any = None) -> int:
    """Percentage of the model's context used by ``total_tokens``, clamped to 0..100."""
    try:
        context = ModelBudget.from_descriptor(descriptor).context
    except ConfigurationError:
        context = DISPLAY_FALLBACK_CONTEXT
    percent = round(total_tokens / context * 100)
    return max(0, min(100, percent))
