"""Tagged result of a governed operation.

Cancellation is reported as ``Aborted`` and never as a failure.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeAlias, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Completed(Generic[T]):
    """The operation produced a value."""

    value: T


@dataclass(frozen=True, slots=True)
class Aborted:
    """The operation was cancelled before or while it ran."""

    reason: str | None = None


@dataclass(frozen=True, slots=True)
class Failed:
    """Every retry and recovery strategy was exhausted."""

    error: Exception


Outcome: TypeAlias = Completed[Any] | Aborted | Failed
