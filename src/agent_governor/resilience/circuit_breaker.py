"""Circuit breaker that stops calling a failing dependency for a while."""

from __future__ import annotations

import logging
import math
import threading
import time
from collections.abc import Awaitable, Callable, Sequence
from enum import StrEnum
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from agent_governor._callbacks import fire_callbacks
from agent_governor.exceptions import CircuitOpenError
from agent_governor.observability.events import CircuitStateChanged
from agent_governor.resilience.timeout import run_with_timeout

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CircuitState(StrEnum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreakerConfig(BaseModel):
    """Thresholds for a ``CircuitBreaker``.

    Parameters:
        failure_threshold: Consecutive failures that open the circuit.
        success_threshold: Successes in HALF_OPEN needed to close it.
        timeout_ms: Per-call time limit; a timeout counts as a failure.
        reset_timeout_ms: How long the circuit stays OPEN before a trial call.
    """

    model_config = ConfigDict(frozen=True)

    failure_threshold: int = Field(default=5, gt=0)
    success_threshold: int = Field(default=2, gt=0)
    timeout_ms: float = Field(default=60_000, gt=0)
    reset_timeout_ms: float = Field(default=60_000, ge=0)


class CircuitBreakerStats(BaseModel):
    """Snapshot of a breaker's counters."""

    model_config = ConfigDict(frozen=True)

    name: str
    state: CircuitState
    failure_count: int
    success_count: int
    last_failure_time: float | None
    next_attempt_time: float


class CircuitBreaker:
    """CLOSED -> OPEN -> HALF_OPEN -> CLOSED state machine around async calls.

    While OPEN, calls are rejected with ``CircuitOpenError`` until
    ``reset_timeout_ms`` has elapsed; the next call then runs in
    HALF_OPEN, where ``success_threshold`` successes close the circuit
    and any failure re-opens it.
    """

    __slots__ = (
        "_clock",
        "_config",
        "_failure_count",
        "_last_failure_time",
        "_lock",
        "_name",
        "_next_attempt",
        "_observers",
        "_state",
        "_success_count",
    )

    def __init__(
        self,
        name: str,
        config: CircuitBreakerConfig | None = None,
        *,
        observers: Sequence[Any] = (),
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._name = name
        self._config = config or CircuitBreakerConfig()
        self._observers = list(observers)
        self._clock = clock
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._success_count = 0
        self._last_failure_time: float | None = None
        self._next_attempt = clock()
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r}, state={self._state.value})"

    @property
    def name(self) -> str:
        return self._name

    @property
    def state(self) -> CircuitState:
        return self._state

    async def execute(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run ``operation`` through the breaker.

        Raises:
            CircuitOpenError: If the circuit is OPEN and the reset
                timeout has not elapsed.
            OperationTimeoutError: If the call exceeds ``timeout_ms``.
        """
        self._before_call()
        try:
            result = await run_with_timeout(operation, self._config.timeout_ms)
        except Exception:
            self._on_failure()
            raise
        self._on_success()
        return result

    def stats(self) -> CircuitBreakerStats:
        with self._lock:
            return CircuitBreakerStats(
                name=self._name,
                state=self._state,
                failure_count=self._failure_count,
                success_count=self._success_count,
                last_failure_time=self._last_failure_time,
                next_attempt_time=self._next_attempt,
            )

    def reset(self) -> None:
        with self._lock:
            self._failure_count = 0
            self._success_count = 0
            self._next_attempt = self._clock()
            self._transition(CircuitState.CLOSED)

    def _before_call(self) -> None:
        with self._lock:
            if self._state is not CircuitState.OPEN:
                return
            now = self._clock()
            if now < self._next_attempt:
                wait_s = math.ceil(self._next_attempt - now)
                msg = (
                    f"Circuit breaker is OPEN for {self._name}. "
                    f"Service temporarily unavailable. Retry in {wait_s}s."
                )
                raise CircuitOpenError(
                    msg,
                    code="circuit_open",
                    details={"name": self._name, "retry_in_s": wait_s},
                )
            self._success_count = 0
            self._transition(CircuitState.HALF_OPEN)

    def _on_success(self) -> None:
        with self._lock:
            self._failure_count = 0
            if self._state is CircuitState.HALF_OPEN:
                self._success_count += 1
                if self._success_count >= self._config.success_threshold:
                    self._success_count = 0
                    self._transition(CircuitState.CLOSED)

    def _on_failure(self) -> None:
        with self._lock:
            self._failure_count += 1
            self._last_failure_time = self._clock()
            if (
                self._state is CircuitState.HALF_OPEN
                or self._failure_count >= self._config.failure_threshold
            ):
                self._next_attempt = self._clock() + self._config.reset_timeout_ms / 1000
                self._transition(CircuitState.OPEN)

    def _transition(self, new_state: CircuitState) -> None:
        previous = self._state
        self._state = new_state
        if previous is new_state:
            return
        fire_callbacks(
            self._observers,
            "on_circuit_state_changed",
            CircuitStateChanged(
                name=self._name,
                previous=previous.value,
                current=new_state.value,
                failure_count=self._failure_count,
            ),
            logger=logger,
        )


class CircuitBreakerRegistry:
    """Named circuit breakers shared by the call sites of one session."""

    __slots__ = ("_breakers", "_clock", "_defaults", "_lock", "_observers")

    def __init__(
        self,
        defaults: CircuitBreakerConfig | None = None,
        *,
        observers: Sequence[Any] = (),
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._defaults = defaults or CircuitBreakerConfig()
        self._observers = list(observers)
        self._clock = clock
        self._breakers: dict[str, CircuitBreaker] = {}
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(breakers={sorted(self._breakers)})"

    def get(self, name: str, **overrides: Any) -> CircuitBreaker:
        """Return the breaker called ``name``, creating it on first use.

        ``overrides`` replace fields of the registry defaults and only
        apply when the breaker is created.
        """
        with self._lock:
            breaker = self._breakers.get(name)
            if breaker is None:
                config = CircuitBreakerConfig.model_validate(
                    {**self._defaults.model_dump(), **overrides}
                )
                breaker = CircuitBreaker(
                    name, config, observers=self._observers, clock=self._clock
                )
                self._breakers[name] = breaker
            return breaker

    def reset_all(self) -> None:
        with self._lock:
            breakers = list(self._breakers.values())
        for breaker in breakers:
            breaker.reset()

    def stats(self) -> dict[str, CircuitBreakerStats]:
        with self._lock:
            breakers = dict(self._breakers)
        return {name: breaker.stats() for name, breaker in breakers.items()}
