"""Tests for tokenizer module."""

import pytest

from modelfusion._features import require_extra
from modelfusion.tokenizer import (
    BasicTokenizer,
    FullTokenizer,
    TikTokenTokenizer,
    count_tokens,
)


class CharEncoding:
    """Encoding with one token per character."""

    def encode(self, text: str) -> list[int]:
        return [ord(char) for char in text]

    def decode(self, tokens: list[int]) -> str:
        return "".join(chr(token) for token in tokens)


class TestTikTokenTokenizer:
    """Tests for TikTokenTokenizer with an injected encoding."""

    @pytest.mark.asyncio
    async def test_tokenize(self) -> None:
        """Test tokenizing text."""
        tokenizer = TikTokenTokenizer(encoding=CharEncoding())
        assert await tokenizer.tokenize("Hi!") == [72, 105, 33]

    @pytest.mark.asyncio
    async def test_tokenize_with_texts(self) -> None:
        """Test the text of every token."""
        tokenizer = TikTokenTokenizer(encoding=CharEncoding())
        result = await tokenizer.tokenize_with_texts("ab")
        assert result.tokens == [97, 98]
        assert result.token_texts == ["a", "b"]

    @pytest.mark.asyncio
    async def test_detokenize(self) -> None:
        """Test mapping tokens back to text."""
        tokenizer = TikTokenTokenizer(encoding=CharEncoding())
        assert await tokenizer.detokenize([72, 105]) == "Hi"

    @pytest.mark.asyncio
    async def test_count_tokens(self) -> None:
        """Test counting tokens."""
        tokenizer = TikTokenTokenizer(encoding=CharEncoding())
        assert await count_tokens(tokenizer, "hello") == 5

    def test_protocols(self) -> None:
        """Test protocol conformance."""
        tokenizer = TikTokenTokenizer(encoding=CharEncoding())
        assert isinstance(tokenizer, BasicTokenizer)
        assert isinstance(tokenizer, FullTokenizer)


class TestFeatures:
    """Tests for optional extras."""

    def test_missing_extra(self) -> None:
        """Test the installation hint for a missing package."""
        with pytest.raises(ImportError) as exc_info:
            require_extra("tokenizer", "modelfusion_missing_package")
        assert "pip install modelfusion-python[tokenizer]" in str(exc_info.value)

    def test_available_extra(self) -> None:
        """Test that installed packages pass."""
        require_extra("schema", "pydantic")
