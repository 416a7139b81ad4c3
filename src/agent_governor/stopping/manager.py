"""Per-session stopping conditions."""

from __future__ import annotations

import inspect
import logging
import threading
import time
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from agent_governor._callbacks import fire_callbacks
from agent_governor.models.run_state import (
    CriteriaResult,
    RunStats,
    StopCondition,
    StopDecision,
    StoppingConfig,
)
from agent_governor.observability.events import StopConditionMet

logger = logging.getLogger(__name__)

SuccessCheck = Callable[[], bool | Awaitable[bool]]


class StoppingConditionManager:
    """Thread-safe accumulator of step, token, cost and error counters.

    One instance lives for a whole session.  ``should_stop`` compares the
    counters and the elapsed time against ``StoppingConfig`` in a fixed
    order (steps, tokens, cost, time, errors) and reports the first
    breached threshold.  Counters are only zeroed by an explicit
    ``reset``.

    Usage::

        manager = StoppingConditionManager(StoppingConfig(max_steps=3))
        manager.increment_step()
        decision = manager.should_stop()
        if decision.stop:
            print(decision.reason)

    Parameters:
        config: Thresholds; defaults to ``StoppingConfig()``.
        success_check: Optional predicate, sync or async, consulted by
            ``check_success_criteria``.
        observers: Receive ``on_stop_condition`` when ``should_stop``
            reports a breach.
        clock: Monotonic time source in seconds, injectable for tests.
    """

    __slots__ = (
        "_clock",
        "_config",
        "_error_count",
        "_estimated_cost",
        "_lock",
        "_observers",
        "_start",
        "_step_count",
        "_success_check",
        "_token_count",
    )

    def __init__(
        self,
        config: StoppingConfig | None = None,
        *,
        success_check: SuccessCheck | None = None,
        observers: Sequence[Any] = (),
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config or StoppingConfig()
        self._success_check = success_check
        self._observers = list(observers)
        self._clock = clock
        self._lock = threading.Lock()
        self._start = clock()
        self._step_count = 0
        self._token_count = 0
        self._estimated_cost = 0.0
        self._error_count = 0
        logger.debug("Stopping condition manager initialized: %s", self._config)

    def __repr__(self) -> str:
        with self._lock:
            steps = self._step_count
        return f"{type(self).__name__}(steps={steps}, config={self._config!r})"

    @property
    def config(self) -> StoppingConfig:
        return self._config

    def increment_step(self) -> None:
        with self._lock:
            self._step_count += 1

    def add_tokens(self, count: int) -> None:
        if count < 0:
            msg = "token count must be non-negative"
            raise ValueError(msg)
        with self._lock:
            self._token_count += count

    def add_cost(self, cost: float) -> None:
        if cost < 0:
            msg = "cost must be non-negative"
            raise ValueError(msg)
        with self._lock:
            self._estimated_cost += cost

    def increment_error(self) -> None:
        with self._lock:
            self._error_count += 1

    def elapsed_ms(self) -> float:
        return (self._clock() - self._start) * 1000

    def breached_condition(self) -> StopDecision:
        """Evaluate the thresholds without notifying observers."""
        decision, _ = self._evaluate()
        return decision

    def should_stop(self) -> StopDecision:
        """Return the first breached threshold, if any.

        Every breach forces a stop; the order only decides which single
        reason is reported.
        """
        decision, values = self._evaluate()
        if decision.stop and values is not None:
            current, limit = values
            fire_callbacks(
                self._observers,
                "on_stop_condition",
                StopConditionMet(
                    condition=str(decision.condition),
                    reason=decision.reason or "",
                    current=current,
                    limit=limit,
                ),
                logger=logger,
            )
        return decision

    def _evaluate(self) -> tuple[StopDecision, tuple[float, float] | None]:
        config = self._config
        with self._lock:
            steps = self._step_count
            tokens = self._token_count
            cost = self._estimated_cost
            errors = self._error_count
        elapsed = self.elapsed_ms()

        if config.max_steps is not None and steps >= config.max_steps:
            reason = f"Maximum steps reached ({steps}/{config.max_steps})"
            return _stop(StopCondition.STEPS, reason), (steps, config.max_steps)
        if config.max_tokens is not None and tokens >= config.max_tokens:
            reason = f"Token limit reached ({tokens}/{config.max_tokens})"
            return _stop(StopCondition.TOKENS, reason), (tokens, config.max_tokens)
        if config.max_cost is not None and cost >= config.max_cost:
            reason = f"Cost budget exceeded (${cost:.3f}/${config.max_cost:g})"
            return _stop(StopCondition.COST, reason), (cost, config.max_cost)
        if config.time_limit_ms is not None and elapsed >= config.time_limit_ms:
            reason = (
                f"Time limit reached ({round(elapsed / 1000)}s/"
                f"{round(config.time_limit_ms / 1000)}s)"
            )
            return _stop(StopCondition.TIME, reason), (elapsed, config.time_limit_ms)
        if config.error_threshold is not None and errors >= config.error_threshold:
            reason = f"Error threshold exceeded ({errors}/{config.error_threshold})"
            return _stop(StopCondition.ERRORS, reason), (errors, config.error_threshold)
        return StopDecision(stop=False), None

    async def check_success_criteria(self) -> CriteriaResult:
        """Consult the success predicate; its failures are reported, not raised."""
        if self._success_check is None:
            return CriteriaResult(met=False, details="No success criteria defined")
        try:
            result = self._success_check()
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:
            logger.debug("Success criteria check raised", exc_info=True)
            message = str(exc) or type(exc).__name__
            return CriteriaResult(
                met=False, details=f"Custom criteria check failed: {message}"
            )
        if result:
            return CriteriaResult(met=True, details="Custom criteria met")
        return CriteriaResult(met=False, details="Custom criteria not met")

    def stats(self) -> RunStats:
        with self._lock:
            return RunStats(
                step_count=self._step_count,
                token_count=self._token_count,
                estimated_cost=self._estimated_cost,
                error_count=self._error_count,
                elapsed_ms=self.elapsed_ms(),
                config=self._config,
            )

    def reset(self) -> None:
        """Zero every counter and restart the clock."""
        with self._lock:
            self._start = self._clock()
            self._step_count = 0
            self._token_count = 0
            self._estimated_cost = 0.0
            self._error_count = 0
        logger.debug("Stopping condition manager reset")


def _stop(condition: StopCondition, reason: str) -> StopDecision:
    return StopDecision(stop=True, reason=reason, condition=condition)
