"""Built-in observers for governor decision events."""

from __future__ import annotations

import json
import logging

from agent_governor.observability.events import (
    CircuitStateChanged,
    GovernorEvent,
    HistoryTrimmed,
    RecoveryAttempted,
    RetryScheduled,
    StopConditionMet,
)

logger = logging.getLogger(__name__)


class InMemoryObserver:
    """Stores events in memory for testing and inspection."""

    __slots__ = ("_events",)

    def __init__(self) -> None:
        self._events: list[GovernorEvent] = []

    def __repr__(self) -> str:
        return f"{type(self).__name__}(events={len(self._events)})"

    def on_history_trimmed(self, event: HistoryTrimmed) -> None:
        self._events.append(event)

    def on_stop_condition(self, event: StopConditionMet) -> None:
        self._events.append(event)

    def on_recovery_attempted(self, event: RecoveryAttempted) -> None:
        self._events.append(event)

    def on_retry_scheduled(self, event: RetryScheduled) -> None:
        self._events.append(event)

    def on_circuit_state_changed(self, event: CircuitStateChanged) -> None:
        self._events.append(event)

    def get_events(self, kind: str | None = None) -> list[GovernorEvent]:
        """Return recorded events, optionally filtered by ``kind``.

        Parameters:
            kind: If provided, only return events of this kind
                (e.g. ``"history_trimmed"``).
        """
        if kind is None:
            return list(self._events)
        return [e for e in self._events if e.kind == kind]

    def clear(self) -> None:
        self._events.clear()


class LoggingObserver:
    """Logs each event via the standard ``logging`` module as one JSON line.

    Stop conditions are logged at ``stop_level`` (``WARNING`` by default)
    so they stand out from routine trimming and retries.
    """

    __slots__ = ("_log_level", "_stop_level")

    def __init__(
        self, log_level: int = logging.INFO, stop_level: int = logging.WARNING
    ) -> None:
        self._log_level = log_level
        self._stop_level = stop_level

    def _emit(self, event: GovernorEvent, level: int) -> None:
        logger.log(level, json.dumps(event.model_dump(mode="json"), default=str))

    def on_history_trimmed(self, event: HistoryTrimmed) -> None:
        self._emit(event, self._log_level)

    def on_stop_condition(self, event: StopConditionMet) -> None:
        self._emit(event, self._stop_level)

    def on_recovery_attempted(self, event: RecoveryAttempted) -> None:
        self._emit(event, self._log_level)

    def on_retry_scheduled(self, event: RetryScheduled) -> None:
        self._emit(event, self._log_level)

    def on_circuit_state_changed(self, event: CircuitStateChanged) -> None:
        self._emit(event, self._log_level)
