"""
Throttle functions that bound how API calls are issued.

A throttle function wraps a zero-argument async call. Unlike retry
functions, a throttle is usually shared between calls (e.g. one instance in
an ApiConfiguration), so that the bound applies across all of them.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Protocol, TypeVar

from modelfusion.resilience.rate_limiter import RateLimiter, RateLimiterConfig

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

T = TypeVar("T")


class ThrottleFunction(Protocol):
    """Callable that executes an async operation under a throttle."""

    async def __call__(self, fn: Callable[[], Awaitable[T]]) -> T: ...


def throttle_off() -> ThrottleFunction:
    """Create a throttle function that does not throttle."""

    async def throttle(fn: Callable[[], Awaitable[T]]) -> T:
        return await fn()

    return throttle


class _MaxConcurrencyThrottle:
    def __init__(self, max_concurrent_calls: int) -> None:
        if max_concurrent_calls < 1:
            raise ValueError("max_concurrent_calls must be at least 1")
        self._max = max_concurrent_calls
        self._semaphore: asyncio.Semaphore | None = None
        self._active = 0

    def _get_semaphore(self) -> asyncio.Semaphore:
        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(self._max)
        return self._semaphore

    async def __call__(self, fn: Callable[[], Awaitable[T]]) -> T:
        async with self._get_semaphore():
            self._active += 1
            try:
                return await fn()
            finally:
                self._active -= 1

    @property
    def active_calls(self) -> int:
        """Number of calls currently running."""
        return self._active

    @property
    def max_concurrent_calls(self) -> int:
        return self._max


def throttle_max_concurrency(max_concurrent_calls: int) -> ThrottleFunction:
    """Create a throttle that limits the number of concurrent calls.

    Calls beyond the limit wait in FIFO order until a slot frees up.

    Args:
        max_concurrent_calls: Maximum calls in flight at the same time

    Returns:
        ThrottleFunction

    Example:
        >>> throttle = throttle_max_concurrency(max_concurrent_calls=2)
        >>> api = BaseUrlApiConfiguration(base_url="...", throttle=throttle)
    """
    return _MaxConcurrencyThrottle(max_concurrent_calls)


def throttle_rate_limit(
    requests_per_second: float,
    burst_size: int | None = None,
) -> ThrottleFunction:
    """Create a throttle that limits the rate at which calls start.

    Args:
        requests_per_second: Sustained call rate
        burst_size: Maximum calls that may start back-to-back

    Returns:
        ThrottleFunction
    """
    config = RateLimiterConfig.from_rps(requests_per_second)
    if burst_size is not None:
        config.burst_size = burst_size
        config.initial_tokens = burst_size
    limiter = RateLimiter(config)

    async def throttle(fn: Callable[[], Awaitable[T]]) -> T:
        await limiter.acquire()
        return await fn()

    return throttle
