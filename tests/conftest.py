"""Shared fixtures for agent-governor tests."""

from __future__ import annotations

import pytest

from agent_governor.models.messages import Message
from agent_governor.observability.observers import InMemoryObserver
from agent_governor.tokens.estimator import MESSAGE_OVERHEAD_TOKENS, TokenEstimator


class FakeTokenizer:
    """A simple tokenizer that splits on whitespace for testing.

    Satisfies the Tokenizer protocol without requiring tiktoken's
    network-downloaded encoding data.
    """

    def count_tokens(self, text: str) -> int:
        """Count tokens by splitting on whitespace."""
        if not text or not text.strip():
            return 0
        return len(text.split())


class FakeClock:
    """Manually advanced monotonic clock, in seconds."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Async ``sleep`` stand-in that records the requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def words(n: int) -> str:
    """Return text that FakeTokenizer counts as exactly ``n`` tokens."""
    return " ".join(["w"] * n)


def make_message(role: str, tokens: int) -> Message:
    """Create a plain-text message whose estimate under FakeTokenizer is ``tokens``.

    Only for non-tool roles; tool messages carry extra framing overhead.
    """
    return Message(role=role, content=words(tokens - MESSAGE_OVERHEAD_TOKENS))


@pytest.fixture
def estimator() -> TokenEstimator:
    return TokenEstimator(FakeTokenizer())


@pytest.fixture
def observer() -> InMemoryObserver:
    return InMemoryObserver()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()
