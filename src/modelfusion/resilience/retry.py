"""
Retry functions with exponential backoff and jitter.

A retry function wraps a zero-argument async call and decides whether,
when and how often it is repeated. Model settings carry a retry function
through their ApiConfiguration.
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol, TypeVar

from modelfusion.errors import AbortError, ApiCallError, RetryError, RetryReason
from modelfusion.telemetry.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

T = TypeVar("T")

logger = get_logger("modelfusion.resilience.retry")


class RetryFunction(Protocol):
    """Callable that executes an async operation with a retry strategy."""

    async def __call__(self, fn: Callable[[], Awaitable[T]]) -> T: ...


class JitterStrategy(str, Enum):
    """Jitter strategy for retry delays."""

    NONE = "none"
    FULL = "full"
    EQUAL = "equal"


@dataclass
class RetryConfig:
    """Configuration for exponential backoff.

    Attributes:
        max_tries: Maximum number of attempts, including the first
        initial_delay_ms: Delay before the second attempt in milliseconds
        backoff_factor: Multiplier applied to the delay after each attempt
        max_delay_ms: Upper bound for a single delay
        jitter: Jitter strategy (none, full, equal)
    """

    max_tries: int = 3
    initial_delay_ms: int = 2000
    backoff_factor: float = 2.0
    max_delay_ms: int = 60000
    jitter: JitterStrategy = JitterStrategy.NONE

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> RetryConfig:
        """Create config from a plain mapping (e.g. loaded settings).

        Args:
            data: Mapping with any of the attribute names

        Returns:
            RetryConfig instance
        """
        if not data:
            return cls()

        jitter_str = data.get("jitter", "none")
        jitter = (
            JitterStrategy(jitter_str)
            if jitter_str in ("none", "full", "equal")
            else JitterStrategy.NONE
        )

        return cls(
            max_tries=data.get("max_tries", 3),
            initial_delay_ms=data.get("initial_delay_ms", 2000),
            backoff_factor=data.get("backoff_factor", 2.0),
            max_delay_ms=data.get("max_delay_ms", 60000),
            jitter=jitter,
        )

    def calculate_delay(self, try_number: int, retry_after: float | None = None) -> float:
        """Calculate the delay after a failed attempt.

        Args:
            try_number: Attempt that just failed (1-based)
            retry_after: Optional retry-after hint from the server, in seconds

        Returns:
            Delay in seconds
        """
        if retry_after is not None and retry_after > 0:
            return retry_after

        base_delay_ms = self.initial_delay_ms * (self.backoff_factor ** (try_number - 1))
        base_delay_ms = min(base_delay_ms, self.max_delay_ms)

        if self.jitter == JitterStrategy.FULL:
            delay_ms = random.uniform(0, base_delay_ms)
        elif self.jitter == JitterStrategy.EQUAL:
            delay_ms = base_delay_ms / 2 + random.uniform(0, base_delay_ms / 2)
        else:
            delay_ms = base_delay_ms

        return delay_ms / 1000.0


def retry_never() -> RetryFunction:
    """Create a retry function that calls the operation exactly once."""

    async def retry(fn: Callable[[], Awaitable[T]]) -> T:
        return await fn()

    return retry


def retry_with_exponential_backoff(
    max_tries: int = 3,
    initial_delay_ms: int = 2000,
    backoff_factor: float = 2.0,
    *,
    max_delay_ms: int = 60000,
    jitter: JitterStrategy = JitterStrategy.NONE,
    on_retry: Callable[[int, BaseException, float], None] | None = None,
) -> RetryFunction:
    """Create a retry function with exponential backoff.

    Only ``ApiCallError`` instances with ``is_retryable`` set are retried.
    A non-retryable error on the first attempt propagates unchanged; later
    failures are wrapped in a RetryError that carries every attempt's error.

    Args:
        max_tries: Maximum number of attempts, including the first
        initial_delay_ms: Delay before the second attempt in milliseconds
        backoff_factor: Multiplier applied to the delay after each attempt
        max_delay_ms: Upper bound for a single delay
        jitter: Jitter strategy
        on_retry: Optional callback ``(try_number, error, delay_seconds)``

    Returns:
        RetryFunction

    Example:
        >>> retry = retry_with_exponential_backoff(max_tries=5, initial_delay_ms=1000)
        >>> value = await retry(lambda: post_json_to_api(...))
    """
    config = RetryConfig(
        max_tries=max_tries,
        initial_delay_ms=initial_delay_ms,
        backoff_factor=backoff_factor,
        max_delay_ms=max_delay_ms,
        jitter=jitter,
    )
    return _exponential_backoff(config, on_retry)


def _exponential_backoff(
    config: RetryConfig,
    on_retry: Callable[[int, BaseException, float], None] | None,
) -> RetryFunction:
    async def retry(fn: Callable[[], Awaitable[T]]) -> T:
        errors: list[BaseException] = []
        try_number = 0

        while True:
            try_number += 1
            try:
                return await fn()
            except AbortError:
                raise
            except Exception as e:
                errors.append(e)

                if not (isinstance(e, ApiCallError) and e.is_retryable):
                    if try_number == 1:
                        raise
                    raise RetryError(
                        f"Failed after {try_number} attempt(s) with non-retryable error: "
                        f"'{e}'",
                        reason=RetryReason.ERROR_NOT_RETRYABLE,
                        errors=errors,
                    ) from e

                if try_number >= config.max_tries:
                    raise RetryError(
                        f"Failed after {try_number} attempt(s). Last error: {e}",
                        reason=RetryReason.MAX_TRIES_EXCEEDED,
                        errors=errors,
                    ) from e

                delay = config.calculate_delay(try_number, e.retry_after)
                logger.debug(
                    "Retrying API call",
                    try_number=try_number,
                    delay_seconds=delay,
                    error=str(e),
                )
                if on_retry:
                    on_retry(try_number, e, delay)

                await asyncio.sleep(delay)

    return retry
