"""Custom exceptions for agent-governor."""

from __future__ import annotations

from typing import Any

__all__ = [
    "CircuitOpenError",
    "ConfigurationError",
    "FatalError",
    "GovernorError",
    "HistoryValidationError",
    "OperationAborted",
    "OperationTimeoutError",
    "ToolExecutionError",
    "TransientError",
]


class GovernorError(Exception):
    """Base exception for all agent-governor errors.

    Parameters:
        message: Human-readable description.
        code: Optional machine-readable error code.
        details: Optional structured context for diagnostics.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": type(self).__name__,
            "message": str(self),
            "code": self.code,
            "details": self.details,
        }


class ConfigurationError(GovernorError):
    """Raised when model or threshold configuration is missing or malformed."""


class HistoryValidationError(GovernorError):
    """Raised when a conversation history pairs a tool result with no matching tool call."""


class FatalError(GovernorError):
    """Unrecoverable failure that must surface to the session loop."""


class TransientError(GovernorError):
    """A failure expected to clear on its own; always considered retryable."""

    def __init__(
        self,
        message: str,
        retry_after_ms: float | None = None,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)
        self.retry_after_ms = retry_after_ms

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "retry_after_ms": self.retry_after_ms}


class OperationTimeoutError(TransientError):
    """Raised when a bounded operation loses its race against the timer."""


class ToolExecutionError(GovernorError):
    """A single tool invocation failed."""

    def __init__(
        self,
        message: str,
        tool_name: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)
        self.tool_name = tool_name

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "tool_name": self.tool_name}


class OperationAborted(GovernorError):
    """Unwinds an operation whose cancellation token fired.

    Converted to an ``Aborted`` outcome at the session boundary; it is
    not a failure.
    """


class CircuitOpenError(GovernorError):
    """Raised when a circuit breaker rejects a call without running it."""
