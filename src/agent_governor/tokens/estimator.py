"""Per-message token cost estimation.

Costs are recomputed on every call and never cached on the message, so
an estimate always reflects the message's current content.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from agent_governor.models.messages import (
    PART_MODELS,
    TextPart,
    ToolCallPart,
    ToolResultPart,
)
from agent_governor.protocols.tokenizer import Tokenizer
from agent_governor.tokens.counter import get_default_counter

logger = logging.getLogger(__name__)

# Text at or above this length is approximated instead of tokenized.
APPROXIMATION_THRESHOLD_CHARS = 12_000
MESSAGE_OVERHEAD_TOKENS = 4
TOOL_MESSAGE_OVERHEAD_TOKENS = 15
TOOL_CALL_OVERHEAD_TOKENS = 10
SERIALIZATION_PLACEHOLDER = "[Complex Object]"


def _approximate(text: str) -> int:
    # ceil(len * 0.4) in integer arithmetic
    return -(-len(text) * 2 // 5)


class TokenEstimator:
    """Estimates the token cost of conversation messages.

    Plain text is counted exactly with the tokenizer unless it is at
    least ``APPROXIMATION_THRESHOLD_CHARS`` long, in which case
    ``ceil(len * 0.4)`` is used.  Structured content is costed per part,
    then a framing overhead is added per message (and more for ``tool``
    messages).

    ``estimate`` never raises: values that cannot be serialized are
    costed as a fixed placeholder string, and a failing tokenizer falls
    back to the character approximation.

    Parameters:
        tokenizer: Exact counter for short text.  Defaults to the shared
            tiktoken counter, created on first use.
    """

    __slots__ = ("_tokenizer",)

    def __init__(self, tokenizer: Tokenizer | None = None) -> None:
        self._tokenizer = tokenizer

    def __repr__(self) -> str:
        return f"{type(self).__name__}(tokenizer={self._tokenizer!r})"

    @property
    def tokenizer(self) -> Tokenizer:
        if self._tokenizer is None:
            self._tokenizer = get_default_counter()
        return self._tokenizer

    def count_text(self, text: str) -> int:
        """Token cost of a text string."""
        if len(text) >= APPROXIMATION_THRESHOLD_CHARS:
            return _approximate(text)
        try:
            return max(0, int(self.tokenizer.count_tokens(text)))
        except Exception:
            logger.warning(
                "Tokenizer failed; approximating %d chars", len(text), exc_info=True
            )
            return _approximate(text)

    @staticmethod
    def serialize(value: Any) -> str:
        """Canonical string form of a content value.

        Strings are returned unchanged, pydantic models are dumped in JSON
        mode and everything else goes through ``json.dumps``.  Cyclic or
        non-serializable values yield ``SERIALIZATION_PLACEHOLDER``.
        """
        if isinstance(value, str):
            return value
        try:
            if isinstance(value, BaseModel):
                return value.model_dump_json()
            return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
        except (TypeError, ValueError, RecursionError):
            logger.debug("Failed to serialize %s for token counting", type(value).__name__)
            return SERIALIZATION_PLACEHOLDER

    def estimate_part(self, part: Any) -> int:
        """Token cost of one content part."""
        if isinstance(part, Mapping):
            part = _coerce_mapping_part(part)

        if isinstance(part, TextPart):
            return self.count_text(part.text)
        if isinstance(part, ToolResultPart):
            return self.count_text(self.serialize(part.value))
        if isinstance(part, ToolCallPart):
            tokens = self.count_text(part.tool_name) + TOOL_CALL_OVERHEAD_TOKENS
            if part.args is not None:
                tokens += self.count_text(self.serialize(part.args))
            return tokens
        return self.count_text(self.serialize(part))

    def estimate(self, message: Any) -> int:
        """Token cost of a message: content plus framing overhead.

        Parameters:
            message: A :class:`~agent_governor.models.messages.Message`,
                or any mapping/object exposing ``role`` and ``content``.

        Returns:
            A non-negative integer.
        """
        if isinstance(message, Mapping):
            role = message.get("role")
            content = message.get("content")
        else:
            role = getattr(message, "role", None)
            content = getattr(message, "content", None)

        if isinstance(content, str):
            tokens = self.count_text(content)
        elif isinstance(content, list | tuple):
            tokens = sum(self.estimate_part(part) for part in content)
        else:
            tokens = self.count_text(self.serialize(content))

        tokens += MESSAGE_OVERHEAD_TOKENS
        if role == "tool":
            tokens += TOOL_MESSAGE_OVERHEAD_TOKENS
        return tokens

    def estimate_history(self, history: Any) -> int:
        """Sum of ``estimate`` over an iterable of messages."""
        return sum(self.estimate(message) for message in history)


def _coerce_mapping_part(part: Mapping[str, Any]) -> Any:
    """Turn a raw ``{"type": ...}`` part into its model; anything else is left as-is."""
    part_type = part.get("type")
    model = PART_MODELS.get(part_type) if isinstance(part_type, str) else None
    if model is None:
        return part
    try:
        return model.model_validate(part)
    except ValueError:
        return part


def estimate_tokens(message: Any, tokenizer: Tokenizer | None = None) -> int:
    """Convenience wrapper around ``TokenEstimator(tokenizer).estimate``."""
    return TokenEstimator(tokenizer).estimate(message)
