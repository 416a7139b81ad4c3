"""Session-level composition of the governor components.

``TurnGovernor`` wires the trimmer, the stopping manager and the
resilience layer together for one agent session, the way an agent loop
uses them on every turn::

    governor = TurnGovernor(ModelBudget(context=200_000))
    while True:
        context = governor.prepare_context(history)
        outcome = await governor.run_operation(lambda: call_model(context))
        ...
        if governor.complete_step(tokens=used).stop:
            break
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import AsyncIterable, Awaitable, Callable, Sequence
from typing import Any

from agent_governor.context.trimmer import ContextWindowTrimmer
from agent_governor.context.usage import context_usage_percent
from agent_governor.exceptions import OperationAborted
from agent_governor.models.budget import ModelBudget
from agent_governor.models.outcome import Aborted, Completed, Failed, Outcome
from agent_governor.models.run_state import (
    CriteriaResult,
    RunStats,
    StopDecision,
    StoppingConfig,
)
from agent_governor.resilience.cancellation import CancellationToken, abortable_stream
from agent_governor.resilience.recovery import RecoveryStrategy, execute_with_recovery
from agent_governor.resilience.retry import RetryPolicy, retry_with_backoff
from agent_governor.resilience.streams import StreamHandlers, handle_stream_with_errors
from agent_governor.stopping.manager import StoppingConditionManager

logger = logging.getLogger(__name__)


class TurnGovernor:
    """Runtime governor for one agent session.

    Parameters:
        budget: The model's context budget, or a descriptor accepted by
            ``ModelBudget.from_descriptor``.
        stopping: A ``StoppingConditionManager`` to share, or a
            ``StoppingConfig`` to build one from.  Defaults to the
            default thresholds.
        trimmer: Context trimmer; defaults to FIFO eviction.
        retry_policy: Policy for ``run_operation`` calls that do not pass
            their own.
        recovery_strategies: Ordered strategies tried when an operation
            still fails after its retries.
        observers: Receive decision events from the components the
            governor builds itself.
        max_recoveries: Optional hard cap on recoveries per operation,
            on top of the session's error threshold.
        sleep: Backoff delay function, injectable for tests.

    Raises:
        ConfigurationError: If ``budget`` has no usable capacity.
    """

    __slots__ = (
        "_budget",
        "_max_recoveries",
        "_observers",
        "_retry_policy",
        "_sleep",
        "_stopping",
        "_strategies",
        "_trimmer",
    )

    def __init__(
        self,
        budget: ModelBudget | Any,
        *,
        stopping: StoppingConditionManager | StoppingConfig | None = None,
        trimmer: ContextWindowTrimmer | None = None,
        retry_policy: RetryPolicy | None = None,
        recovery_strategies: Sequence[RecoveryStrategy] = (),
        observers: Sequence[Any] = (),
        max_recoveries: int | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._budget = ModelBudget.from_descriptor(budget)
        self._observers = list(observers)
        if isinstance(stopping, StoppingConditionManager):
            self._stopping = stopping
        else:
            self._stopping = StoppingConditionManager(stopping, observers=self._observers)
        self._trimmer = trimmer or ContextWindowTrimmer(observers=self._observers)
        self._retry_policy = retry_policy or RetryPolicy()
        self._strategies = list(recovery_strategies)
        self._max_recoveries = max_recoveries
        self._sleep = sleep

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(budget={self._budget.context}, "
            f"strategies={len(self._strategies)})"
        )

    @property
    def budget(self) -> ModelBudget:
        return self._budget

    @property
    def stopping(self) -> StoppingConditionManager:
        return self._stopping

    @property
    def trimmer(self) -> ContextWindowTrimmer:
        return self._trimmer

    def prepare_context(self, history: Sequence[Any]) -> Sequence[Any]:
        """Trim ``history`` to the budget's safe limit before a model call."""
        return self._trimmer.trim(history, self._budget)

    def usage_percent(self, history: Sequence[Any]) -> int:
        """Share of the context window ``history`` occupies, for display."""
        total = self._trimmer.estimator.estimate_history(history)
        return context_usage_percent(total, self._budget)

    async def run_operation(
        self,
        operation: Callable[[], Awaitable[Any]],
        *,
        token: CancellationToken | None = None,
        retry_policy: RetryPolicy | None = None,
        operation_name: str = "operation",
    ) -> Outcome:
        """Run ``operation`` under retry, recovery and cancellation.

        Each recovery counts as an error on the stopping manager, and no
        recovery is attempted once any stop condition is breached, so
        the error threshold bounds the recovery loop.

        Returns:
            ``Completed`` with the value, ``Aborted`` if the token was
            cancelled, or ``Failed`` once retries and recoveries are
            exhausted.  Failures also count as an error.
        """
        if token is not None and token.cancelled:
            return Aborted(token.reason)

        policy = retry_policy or self._retry_policy

        async def attempt() -> Any:
            return await retry_with_backoff(
                operation,
                policy,
                operation_name=operation_name,
                observers=self._observers,
                cancel_token=token,
                sleep=self._sleep,
            )

        try:
            value = await execute_with_recovery(
                attempt,
                [self._bounded(s) for s in self._strategies],
                max_recoveries=self._max_recoveries,
                observers=self._observers,
            )
        except OperationAborted as exc:
            reason = token.reason if token is not None and token.reason else str(exc)
            return Aborted(reason)
        except Exception as exc:
            self._stopping.increment_error()
            logger.debug("%s failed after retries and recovery", operation_name, exc_info=True)
            return Failed(exc)
        return Completed(value)

    def _bounded(self, strategy: RecoveryStrategy) -> RecoveryStrategy:
        stopping = self._stopping

        def should_recover(error: Exception) -> bool:
            if stopping.breached_condition().stop:
                return False
            return strategy.should_recover(error)

        async def recover(error: Exception) -> None:
            stopping.increment_error()
            result = strategy.recover(error)
            if inspect.isawaitable(result):
                await result

        return RecoveryStrategy(should_recover, recover, name=strategy.name)

    async def consume_stream(
        self,
        stream: AsyncIterable[Any],
        on_data: Callable[[Any], Any],
        handlers: StreamHandlers | None = None,
        token: CancellationToken | None = None,
    ) -> None:
        """Consume a model response stream, stopping early if ``token`` fires."""
        if token is not None:
            stream = abortable_stream(stream, token)
        await handle_stream_with_errors(stream, on_data, handlers)

    def complete_step(self, tokens: int = 0, cost: float = 0.0) -> StopDecision:
        """Record a finished step with its usage and decide whether to stop."""
        self._stopping.increment_step()
        if tokens:
            self._stopping.add_tokens(tokens)
        if cost:
            self._stopping.add_cost(cost)
        return self._stopping.should_stop()

    async def check_success_criteria(self) -> CriteriaResult:
        return await self._stopping.check_success_criteria()

    def stats(self) -> RunStats:
        return self._stopping.stats()

    def restart(self) -> None:
        """Explicit session restart: zero the counters and restart the clock."""
        self._stopping.reset()
