"""Observer protocol for governor decision events."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from agent_governor.observability.events import (
        CircuitStateChanged,
        HistoryTrimmed,
        RecoveryAttempted,
        RetryScheduled,
        StopConditionMet,
    )


@runtime_checkable
class GovernorObserver(Protocol):
    """Receives structured decision events.

    Observers are passed explicitly to the components that emit events.
    A partial implementation is valid: methods that are missing are
    skipped, and an observer that raises is logged and ignored so it
    can never break a decision.
    """

    def on_history_trimmed(self, event: HistoryTrimmed) -> None:
        """Called after the trimmer evicted messages.

        Parameters:
            event: Old and new message counts plus the tokens freed.
        """
        ...

    def on_stop_condition(self, event: StopConditionMet) -> None:
        """Called when a stop check reports a breached threshold.

        Parameters:
            event: The breached condition with its current value and limit.
        """
        ...

    def on_recovery_attempted(self, event: RecoveryAttempted) -> None:
        """Called before a matched recovery strategy runs.

        Parameters:
            event: The strategy chosen and the error it is recovering from.
        """
        ...

    def on_retry_scheduled(self, event: RetryScheduled) -> None:
        """Called before the backoff delay of a retry.

        Parameters:
            event: Attempt number, delay and the triggering error.
        """
        ...

    def on_circuit_state_changed(self, event: CircuitStateChanged) -> None:
        """Called when a circuit breaker changes state.

        Parameters:
            event: Breaker name with its previous and new state.
        """
        ...
