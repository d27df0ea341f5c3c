"""
Stream deltas produced by streaming model calls.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")


@dataclass
class DeltaValue(Generic[T]):
    """A piece of streamed output.

    Attributes:
        value_delta: The new part of the value (text chunk, audio bytes, ...)
        raw: Raw provider message the delta was extracted from
    """

    value_delta: T
    raw: Any = None

    type: str = "delta"


@dataclass
class DeltaError:
    """An error reported inside a stream."""

    error: BaseException

    type: str = "error"


Delta = DeltaValue[Any] | DeltaError
