"""Tokenizer protocol for token counting abstraction."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Tokenizer(Protocol):
    """Protocol for exact token counting.

    The default implementation uses tiktoken, but any tokenizer
    (HuggingFace tokenizers, sentencepiece, a provider's counting
    endpoint) can be supplied.
    """

    def count_tokens(self, text: str) -> int:
        """Count the number of tokens in a text string.

        Parameters:
            text: The input text to tokenize and count.

        Returns:
            The total number of tokens as determined by the underlying
            tokenization scheme.
        """
        ...
