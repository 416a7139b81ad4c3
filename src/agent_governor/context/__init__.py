"""Context window management: trimming, eviction policies and usage display."""

from .eviction import FIFOEviction, ImportanceEviction
from .trimmer import ContextWindowTrimmer, trim_history
from .usage import DISPLAY_FALLBACK_CONTEXT, context_usage_percent

__all__ = [
    "DISPLAY_FALLBACK_CONTEXT",
    "ContextWindowTrimmer",
    "FIFOEviction",
    "ImportanceEviction",
    "context_usage_percent",
    "trim_history",
]
