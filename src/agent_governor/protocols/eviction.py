"""Eviction policy protocol for the context window trimmer."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from agent_governor.models.messages import Message


@runtime_checkable
class EvictionPolicy(Protocol):
    """Decides which message the trimmer drops next.

    The trimmer calls the policy once per eviction and owns the loop:
    it stops as soon as the history fits or only one evictable message
    is left, whatever policy is in use.
    """

    def select_for_eviction(
        self, history: Sequence[Message], evictable_from: int
    ) -> int:
        """Select the next message to evict.

        Parameters:
            history: The working copy of the history, oldest first.
            evictable_from: Index of the first evictable message; a
                leading system message sits before it and is never
                eligible.

        Returns:
            An index in ``range(evictable_from, len(history))``.
        """
        ...
