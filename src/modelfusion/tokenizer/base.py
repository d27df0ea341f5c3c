"""
Tokenizer protocols.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


@runtime_checkable
class BasicTokenizer(Protocol):
    """Turns text into tokens."""

    async def tokenize(self, text: str) -> list[int]: ...


@dataclass
class TokenizationResult:
    """Tokens together with the text of each token."""

    tokens: list[int] = field(default_factory=list)
    token_texts: list[str] = field(default_factory=list)


@runtime_checkable
class FullTokenizer(BasicTokenizer, Protocol):
    """Tokenizer that can also map tokens back to text."""

    async def tokenize_with_texts(self, text: str) -> TokenizationResult: ...

    async def detokenize(self, tokens: list[int]) -> str: ...


async def count_tokens(tokenizer: BasicTokenizer, text: str) -> int:
    """Count the tokens of ``text``.

    Example:
        >>> await count_tokens(TikTokenTokenizer(model="gpt-4"), "At first, Nox didn't know what to do with the pup.")
        16
    """
    return len(await tokenizer.tokenize(text))
