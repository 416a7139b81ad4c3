"""Protocol definitions for agent-governor's pluggable seams."""

from .eviction import EvictionPolicy
from .observer import GovernorObserver
from .tokenizer import Tokenizer

__all__ = [
    "EvictionPolicy",
    "GovernorObserver",
    "Tokenizer",
]
