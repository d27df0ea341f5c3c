"""
Tokenizer module - token counting.
"""

from modelfusion.tokenizer.base import (
    BasicTokenizer,
    FullTokenizer,
    TokenizationResult,
    count_tokens,
)
from modelfusion.tokenizer.tiktoken_tokenizer import TikTokenTokenizer

__all__ = [
    "BasicTokenizer",
    "FullTokenizer",
    "TikTokenTokenizer",
    "TokenizationResult",
    "count_tokens",
]
