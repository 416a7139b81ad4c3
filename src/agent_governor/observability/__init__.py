"""Observability: decision events and built-in observers."""

from agent_governor.protocols.observer import GovernorObserver

from .events import (
    CircuitStateChanged,
    GovernorEvent,
    HistoryTrimmed,
    RecoveryAttempted,
    RetryScheduled,
    StopConditionMet,
)
from .observers import InMemoryObserver, LoggingObserver

__all__ = [
    "CircuitStateChanged",
    "GovernorEvent",
    "GovernorObserver",
    "HistoryTrimmed",
    "InMemoryObserver",
    "LoggingObserver",
    "RecoveryAttempted",
    "RetryScheduled",
    "StopConditionMet",
]
