"""
Tokenizer backed by tiktoken (OpenAI encodings).

Requires the ``tokenizer`` extra: pip install modelfusion-python[tokenizer]
"""

from __future__ import annotations

from typing import Any

from modelfusion._features import require_extra
from modelfusion.tokenizer.base import TokenizationResult

DEFAULT_ENCODING = "cl100k_base"


class TikTokenTokenizer:
    """Full tokenizer using a tiktoken encoding.

    Args:
        model: Model name used to pick the encoding (e.g. 'gpt-4')
        encoding: Encoding name, or an encoding object with ``encode`` and
            ``decode`` methods

    Example:
        >>> tokenizer = TikTokenTokenizer(model="gpt-4")
        >>> await tokenizer.tokenize("Hello")
        [9906]
    """

    def __init__(self, *, model: str | None = None, encoding: str | Any = None) -> None:
        if encoding is not None and not isinstance(encoding, str):
            self._encoding = encoding
            return

        require_extra("tokenizer", "tiktoken")
        import tiktoken

        if encoding is None and model is not None:
            try:
                self._encoding = tiktoken.encoding_for_model(model)
                return
            except KeyError:
                # Unknown model
                pass

        self._encoding = tiktoken.get_encoding(encoding or DEFAULT_ENCODING)

    async def tokenize(self, text: str) -> list[int]:
        return list(self._encoding.encode(text))

    async def tokenize_with_texts(self, text: str) -> TokenizationResult:
        tokens = list(self._encoding.encode(text))
        return TokenizationResult(
            tokens=tokens,
            token_texts=[self._encoding.decode([token]) for token in tokens],
        )

    async def detokenize(self, tokens: list[int]) -> str:
        return self._encoding.decode(tokens)
