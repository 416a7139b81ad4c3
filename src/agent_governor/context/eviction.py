"""Eviction policies for the context window trimmer.

Each policy implements the ``EvictionPolicy`` protocol by returning the
index of the single message to drop next.  The trimmer owns the loop
and its stop rules, so swapping the policy changes only *which* message
goes, never *how many* may go.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any


class FIFOEviction:
    """Default FIFO eviction -- evict the oldest evictable message first."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

    def select_for_eviction(self, history: Sequence[Any], evictable_from: int) -> int:
        return evictable_from


class ImportanceEviction:
    """Evict the least important evictable message first.

    A user-provided ``importance_fn`` assigns a numeric score to each
    message.  Ties go to the oldest message, so a constant score
    degrades to FIFO.
    """

    __slots__ = ("_importance_fn",)

    def __init__(self, importance_fn: Callable[[Any], float]) -> None:
        self._importance_fn = importance_fn

    def __repr__(self) -> str:
        return f"{type(self).__name__}(importance_fn={self._importance_fn!r})"

    def select_for_eviction(self, history: Sequence[Any], evictable_from: int) -> int:
        """Select the lowest-scoring message at or after ``evictable_from``.

        Parameters:
            history: The working copy of the history, oldest first.
            evictable_from: Index of the first evictable message.

        Returns:
            Index of the message to evict.
        """
        candidates = range(evictable_from, len(history))
        return min(candidates, key=lambda i: (self._importance_fn(history[i]), i))
