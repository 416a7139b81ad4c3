"""Token counting and per-message cost estimation."""

from .counter import TiktokenCounter, get_default_counter
from .estimator import (
    APPROXIMATION_THRESHOLD_CHARS,
    MESSAGE_OVERHEAD_TOKENS,
    SERIALIZATION_PLACEHOLDER,
    TOOL_CALL_OVERHEAD_TOKENS,
    TOOL_MESSAGE_OVERHEAD_TOKENS,
    TokenEstimator,
    estimate_tokens,
)

__all__ = [
    "APPROXIMATION_THRESHOLD_CHARS",
    "MESSAGE_OVERHEAD_TOKENS",
    "SERIALIZATION_PLACEHOLDER",
    "TOOL_CALL_OVERHEAD_TOKENS",
    "TOOL_MESSAGE_OVERHEAD_TOKENS",
    "TiktokenCounter",
    "TokenEstimator",
    "estimate_tokens",
    "get_default_counter",
]
