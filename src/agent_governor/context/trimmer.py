"""Context window trimming.

Keeps a conversation history under the model's safe limit by evicting
messages oldest-first (or per a pluggable ``EvictionPolicy``) while
pinning a leading system message.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from agent_governor._callbacks import fire_callbacks
from agent_governor.context.eviction import FIFOEviction
from agent_governor.models.budget import ModelBudget
from agent_governor.observability.events import HistoryTrimmed
from agent_governor.protocols.eviction import EvictionPolicy
from agent_governor.tokens.estimator import TokenEstimator

logger = logging.getLogger(__name__)


def _role(message: Any) -> Any:
    if isinstance(message, Mapping):
        return message.get("role")
    return getattr(message, "role", None)


class ContextWindowTrimmer:
    """Trims a history to ``budget.safe_limit`` tokens.

    The trimmer never mutates its input.  When the history already fits
    it is returned as the very same object; callers must treat the
    result as read-only.  Otherwise a trimmed copy is returned.

    Eviction stops when the total fits the safe limit or when only one
    evictable message is left, so the result may still be over budget;
    the ``HistoryTrimmed`` event reports that with ``over_budget=True``.

    Parameters:
        estimator: Per-message cost estimator.  Defaults to a
            ``TokenEstimator`` on the shared tiktoken counter.
        eviction_policy: Chooses the message to drop next.  Defaults to
            ``FIFOEviction``.
        observers: Receive ``on_history_trimmed`` after each trim that
            evicted something.
    """

    __slots__ = ("_estimator", "_eviction_policy", "_observers")

    def __init__(
        self,
        estimator: TokenEstimator | None = None,
        eviction_policy: EvictionPolicy | None = None,
        observers: Sequence[Any] = (),
    ) -> None:
        self._estimator = estimator or TokenEstimator()
        self._eviction_policy = eviction_policy or FIFOEviction()
        self._observers = list(observers)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(estimator={self._estimator!r}, "
            f"eviction_policy={self._eviction_policy!r})"
        )

    @property
    def estimator(self) -> TokenEstimator:
        return self._estimator

    def trim(self, history: Sequence[Any], budget: ModelBudget | Any) -> Sequence[Any]:
        """Return ``history`` trimmed to fit the budget's safe limit.

        Parameters:
            history: Messages, oldest first.
            budget: A ``ModelBudget`` or a model descriptor accepted by
                ``ModelBudget.from_descriptor``.

        Raises:
            ConfigurationError: If ``budget`` has no usable capacity.
        """
        budget = ModelBudget.from_descriptor(budget)
        safe_limit = budget.safe_limit
        estimate = self._estimator.estimate

        total = sum(estimate(message) for message in history)
        if total <= safe_limit:
            return history

        trimmed = list(history)
        start = 1 if trimmed and _role(trimmed[0]) == "system" else 0
        tokens_before = total

        while total > safe_limit and len(trimmed) > start + 1:
            index = self._eviction_policy.select_for_eviction(trimmed, start)
            if not start <= index < len(trimmed):
                msg = (
                    f"Eviction policy returned index {index}, outside "
                    f"[{start}, {len(trimmed)})"
                )
                raise IndexError(msg)
            evicted = trimmed.pop(index)
            total -= estimate(evicted)

        over_budget = total > safe_limit
        if over_budget:
            logger.debug(
                "History still over budget after trimming: %d > %.1f", total, safe_limit
            )
        if len(trimmed) < len(history):
            fire_callbacks(
                self._observers,
                "on_history_trimmed",
                HistoryTrimmed(
                    old_count=len(history),
                    new_count=len(trimmed),
                    tokens_freed=tokens_before - total,
                    tokens_before=tokens_before,
                    tokens_after=total,
                    safe_limit=safe_limit,
                    over_budget=over_budget,
                ),
                logger=logger,
            )
        return trimmed


def trim_history(
    history: Sequence[Any],
    budget: ModelBudget | Any,
    *,
    estimator: TokenEstimator | None = None,
) -> Sequence[Any]:
    """Trim ``history`` with a default FIFO ``ContextWindowTrimmer``."""
    return ContextWindowTrimmer(estimator=estimator).trim(history, budget)
