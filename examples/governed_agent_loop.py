"""Example: A governed agent loop. Run with: python examples/governed_agent_loop.py

Demonstrates how a TurnGovernor keeps a simulated agent session in
bounds: the history is trimmed to the model's safe limit before every
call, flaky model calls are retried and recovered, and the loop ends
when a stopping condition is met.

No network access is needed: the "model" is a local coroutine and
token counts come from a whitespace tokenizer.
"""

from __future__ import annotations

import asyncio
import logging

from agent_governor import (
    ContextWindowTrimmer,
    LoggingObserver,
    Message,
    ModelBudget,
    RecoveryStrategy,
    RetryPolicy,
    StoppingConfig,
    TokenEstimator,
    TransientError,
    TurnGovernor,
)
from agent_governor.models.outcome import Completed
from agent_governor.resilience.recovery import error_message_matches
from agent_governor.stopping.conditions import estimate_usage_cost

# ---------------------------------------------------------------------------
# Simple whitespace tokenizer (avoids tiktoken dependency)
# ---------------------------------------------------------------------------


class WhitespaceTokenizer:
    """Minimal tokenizer for demonstration."""

    def count_tokens(self, text: str) -> int:
        if not text or not text.strip():
            return 0
        return len(text.split())


# ---------------------------------------------------------------------------
# A flaky fake model
# ---------------------------------------------------------------------------


class FakeModel:
    """Answers every prompt, but fails on some calls the way real APIs do."""

    def __init__(self) -> None:
        self.calls = 0

    async def complete(self, context: list[Message]) -> str:
        self.calls += 1
        if self.calls % 4 == 1:
            raise TransientError("503 Service Unavailable")
        if self.calls % 7 == 0:
            raise RuntimeError("context length exceeded")
        await asyncio.sleep(0)
        return "thinking " * 30


async def run_session() -> None:
    """Drive a few agent steps under a tight budget."""
    observer = LoggingObserver()
    estimator = TokenEstimator(WhitespaceTokenizer())
    model = FakeModel()
    history: list[Message] = [Message(role="system", content="You are a careful agent.")]

    def shrink_history(error: Exception) -> None:
        # Drop the oldest turn after the system prompt.
        if len(history) > 2:
            del history[1]

    governor = TurnGovernor(
        ModelBudget(context=300, name="tiny-model"),
        stopping=StoppingConfig(max_steps=6, max_cost=0.05),
        trimmer=ContextWindowTrimmer(estimator=estimator, observers=[observer]),
        retry_policy=RetryPolicy(max_retries=2, initial_delay_ms=10),
        recovery_strategies=[
            RecoveryStrategy(
                error_message_matches("context length"), shrink_history, name="shrink"
            )
        ],
        observers=[observer],
    )

    step = 0
    while True:
        step += 1
        history.append(Message(role="user", content=f"step {step}: " + "detail " * 40))
        context = list(governor.prepare_context(history))
        print(f"step {step}: {len(history)} messages, sending {len(context)}")

        outcome = await governor.run_operation(
            lambda: model.complete(list(governor.prepare_context(history)))
        )
        if isinstance(outcome, Completed):
            history.append(Message(role="assistant", content=outcome.value))
        else:
            print(f"  model call did not complete: {outcome}")

        used = estimator.estimate_history(context)
        decision = governor.complete_step(
            tokens=used, cost=estimate_usage_cost(used, 30)
        )
        print(f"  usage {governor.usage_percent(context)}% of context")
        if decision.stop:
            print(f"Stopping: {decision.reason}")
            break

    print(governor.stats().model_dump_json(indent=2))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    asyncio.run(run_session())
