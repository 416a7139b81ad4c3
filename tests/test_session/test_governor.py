"""Tests for agent_governor.session.TurnGovernor."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any

import pytest

from agent_governor.context.trimmer import ContextWindowTrimmer
from agent_governor.exceptions import ConfigurationError, OperationAborted
from agent_governor.models.budget import ModelBudget
from agent_governor.models.outcome import Aborted, Completed, Failed
from agent_governor.models.run_state import StoppingConfig
from agent_governor.observability.observers import InMemoryObserver
from agent_governor.resilience.cancellation import CancellationToken
from agent_governor.resilience.recovery import RecoveryStrategy, error_message_matches
from agent_governor.resilience.retry import RetryPolicy
from agent_governor.resilience.streams import StreamHandlers
from agent_governor.session import TurnGovernor
from agent_governor.stopping.manager import StoppingConditionManager
from agent_governor.tokens.estimator import TokenEstimator
from tests.conftest import RecordingSleep, make_message


def _governor(
    estimator: TokenEstimator,
    recording_sleep: RecordingSleep,
    context: int = 200,
    **kwargs: Any,
) -> TurnGovernor:
    return TurnGovernor(
        ModelBudget(context=context),
        trimmer=ContextWindowTrimmer(estimator=estimator, observers=kwargs.get("observers", ())),
        sleep=recording_sleep,
        **kwargs,
    )


class TestConstruction:
    """Budget and collaborator wiring."""

    def test_descriptor_budget(self) -> None:
        governor = TurnGovernor({"context": 1000})
        assert governor.budget.safe_limit == 800

    def test_missing_budget_raises(self) -> None:
        with pytest.raises(ConfigurationError):
            TurnGovernor({"name": "unknown"})

    def test_shared_stopping_manager(self) -> None:
        manager = StoppingConditionManager()
        assert TurnGovernor({"context": 10}, stopping=manager).stopping is manager

    def test_stopping_config(self) -> None:
        governor = TurnGovernor({"context": 10}, stopping=StoppingConfig(max_steps=2))
        assert governor.stopping.config.max_steps == 2


class TestPrepareContext:
    """History trimming before each model call."""

    def test_trims_to_safe_limit(
        self,
        estimator: TokenEstimator,
        recording_sleep: RecordingSleep,
        observer: InMemoryObserver,
    ) -> None:
        system, user, assistant = (
            make_message("system", 50),
            make_message("user", 80),
            make_message("assistant", 80),
        )
        governor = _governor(estimator, recording_sleep, observers=[observer])

        assert governor.prepare_context([system, user, assistant]) == [system, assistant]
        assert len(observer.get_events("history_trimmed")) == 1

    def test_usage_percent(
        self, estimator: TokenEstimator, recording_sleep: RecordingSleep
    ) -> None:
        governor = _governor(estimator, recording_sleep)
        assert governor.usage_percent([make_message("user", 50)]) == 25


class TestRunOperation:
    """Operations run under retry, recovery and cancellation."""

    @pytest.mark.asyncio()
    async def test_completed(
        self, estimator: TokenEstimator, recording_sleep: RecordingSleep
    ) -> None:
        async def op() -> str:
            return "answer"

        outcome = await _governor(estimator, recording_sleep).run_operation(op)
        assert outcome == Completed("answer")

    @pytest.mark.asyncio()
    async def test_retries_before_completing(
        self, estimator: TokenEstimator, recording_sleep: RecordingSleep
    ) -> None:
        calls: list[int] = []

        async def op() -> str:
            calls.append(1)
            if len(calls) < 3:
                raise ConnectionError("reset")
            return "ok"

        governor = _governor(
            estimator, recording_sleep, retry_policy=RetryPolicy(initial_delay_ms=10)
        )
        assert isinstance(await governor.run_operation(op), Completed)
        assert recording_sleep.delays == [0.01, 0.02]

    @pytest.mark.asyncio()
    async def test_precancelled_token_is_aborted(
        self, estimator: TokenEstimator, recording_sleep: RecordingSleep
    ) -> None:
        token = CancellationToken()
        token.cancel("user pressed stop")
        called: list[int] = []

        async def op() -> None:
            called.append(1)

        outcome = await _governor(estimator, recording_sleep).run_operation(op, token=token)
        assert outcome == Aborted("user pressed stop")
        assert called == []

    @pytest.mark.asyncio()
    async def test_abort_during_operation_is_not_a_failure(
        self, estimator: TokenEstimator, recording_sleep: RecordingSleep
    ) -> None:
        async def op() -> None:
            raise OperationAborted("stream cancelled")

        governor = _governor(estimator, recording_sleep)
        outcome = await governor.run_operation(op)
        assert isinstance(outcome, Aborted)
        assert governor.stats().error_count == 0

    @pytest.mark.asyncio()
    async def test_exhausted_retries_fail(
        self, estimator: TokenEstimator, recording_sleep: RecordingSleep
    ) -> None:
        error = RuntimeError("permanent")

        async def op() -> None:
            raise error

        governor = _governor(estimator, recording_sleep, retry_policy=RetryPolicy(max_retries=1))
        outcome = await governor.run_operation(op)
        assert outcome == Failed(error)
        assert governor.stats().error_count == 1

    @pytest.mark.asyncio()
    async def test_recovery_then_success(
        self, estimator: TokenEstimator, recording_sleep: RecordingSleep
    ) -> None:
        state = {"fixed": False}
        recovered: list[str] = []

        async def op() -> str:
            if not state["fixed"]:
                raise RuntimeError("context length exceeded")
            return "ok"

        def fix(error: Exception) -> None:
            recovered.append(str(error))
            state["fixed"] = True

        governor = _governor(
            estimator,
            recording_sleep,
            retry_policy=RetryPolicy(max_retries=0),
            recovery_strategies=[RecoveryStrategy(error_message_matches("context length"), fix)],
        )
        assert await governor.run_operation(op) == Completed("ok")
        assert recovered == ["context length exceeded"]
        assert governor.stats().error_count == 1

    @pytest.mark.asyncio()
    async def test_error_threshold_bounds_recovery(
        self, estimator: TokenEstimator, recording_sleep: RecordingSleep
    ) -> None:
        calls: list[int] = []
        recoveries: list[int] = []

        async def op() -> None:
            calls.append(1)
            raise RuntimeError("rate limit")

        governor = _governor(
            estimator,
            recording_sleep,
            stopping=StoppingConfig(error_threshold=3),
            retry_policy=RetryPolicy(max_retries=0),
            recovery_strategies=[
                RecoveryStrategy(error_message_matches("rate limit"), lambda e: recoveries.append(1))
            ],
        )
        outcome = await governor.run_operation(op)

        assert isinstance(outcome, Failed)
        assert len(recoveries) == 3
        assert len(calls) == 4
        assert governor.complete_step().reason == "Error threshold exceeded (4/3)"


class TestConsumeStream:
    """Stream consumption with cancellation."""

    @pytest.mark.asyncio()
    async def test_routes_chunks(
        self, estimator: TokenEstimator, recording_sleep: RecordingSleep
    ) -> None:
        async def stream() -> AsyncIterator[Any]:
            yield "a"
            yield {"type": "tool-error", "error": RuntimeError("x"), "tool_name": "grep"}
            yield "b"

        data: list[Any] = []
        tool_errors: list[str] = []
        await _governor(estimator, recording_sleep).consume_stream(
            stream(),
            data.append,
            StreamHandlers(on_tool_error=lambda e, name: tool_errors.append(name)),
        )
        assert data == ["a", "b"]
        assert tool_errors == ["grep"]

    @pytest.mark.asyncio()
    async def test_token_stops_stream(
        self, estimator: TokenEstimator, recording_sleep: RecordingSleep
    ) -> None:
        token = CancellationToken()

        async def stream() -> AsyncIterator[str]:
            for chunk in ("a", "b", "c"):
                yield chunk

        data: list[str] = []

        def on_data(value: str) -> None:
            data.append(value)
            if value == "b":
                token.cancel()

        await _governor(estimator, recording_sleep).consume_stream(stream(), on_data, token=token)
        assert data == ["a", "b"]


class TestSteps:
    """complete_step feeds the stopping manager."""

    def test_max_steps(self, estimator: TokenEstimator, recording_sleep: RecordingSleep) -> None:
        governor = _governor(estimator, recording_sleep, stopping=StoppingConfig(max_steps=3))
        assert governor.complete_step().stop is False
        assert governor.complete_step().stop is False
        decision = governor.complete_step()
        assert decision.stop is True
        assert decision.reason == "Maximum steps reached (3/3)"

    def test_usage_is_accumulated(
        self, estimator: TokenEstimator, recording_sleep: RecordingSleep
    ) -> None:
        governor = _governor(estimator, recording_sleep)
        governor.complete_step(tokens=500, cost=0.02)
        governor.complete_step(tokens=250)
        stats = governor.stats()
        assert stats.step_count == 2
        assert stats.token_count == 750
        assert stats.estimated_cost == pytest.approx(0.02)

    def test_restart(self, estimator: TokenEstimator, recording_sleep: RecordingSleep) -> None:
        governor = _governor(estimator, recording_sleep, stopping=StoppingConfig(max_steps=1))
        assert governor.complete_step().stop is True
        governor.restart()
        assert governor.stats().step_count == 0

    @pytest.mark.asyncio()
    async def test_success_criteria(
        self, estimator: TokenEstimator, recording_sleep: RecordingSleep
    ) -> None:
        manager = StoppingConditionManager(success_check=lambda: True)
        governor = TurnGovernor({"context": 100}, stopping=manager)
        assert (await governor.check_success_criteria()).met is True
