"""
Token bucket rate limiter behind ``throttle_rate_limit``.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass


@dataclass
class RateLimiterConfig:
    """Rate limiter settings.

    Attributes:
        requests_per_second: Refill rate of the bucket (0 disables limiting)
        burst_size: Bucket capacity, i.e. calls that may start back-to-back
        initial_tokens: Tokens at start (defaults to a full bucket)
    """

    requests_per_second: float = 0.0
    burst_size: int | None = None
    initial_tokens: int | None = None

    @classmethod
    def from_rps(cls, rps: float, burst_multiplier: float = 1.5) -> RateLimiterConfig:
        """Config for ``rps`` calls per second with a burst of ``rps * burst_multiplier``."""
        if rps <= 0:
            return cls()
        burst = max(1, int(rps * burst_multiplier))
        return cls(requests_per_second=rps, burst_size=burst, initial_tokens=burst)

    @classmethod
    def from_rpm(cls, rpm: float, burst_multiplier: float = 1.5) -> RateLimiterConfig:
        """Config for provider limits given per minute."""
        return cls.from_rps(rpm / 60.0, burst_multiplier)


class RateLimiter:
    """Token bucket.

    The bucket refills continuously at ``requests_per_second``; each call
    takes one token and waits while the bucket is empty. Waiting callers are
    served one at a time in arrival order.

    Example:
        >>> limiter = RateLimiter(RateLimiterConfig.from_rpm(500))
        >>> await limiter.acquire()
    """

    def __init__(self, config: RateLimiterConfig | None = None) -> None:
        config = config or RateLimiterConfig()
        self._rate = config.requests_per_second
        self._capacity = float(config.burst_size or 1)
        start = config.initial_tokens if config.initial_tokens is not None else self._capacity
        self._tokens = min(float(start), self._capacity)
        self._updated_at = time.monotonic()
        self._lock = asyncio.Lock()

    @property
    def is_limited(self) -> bool:
        return self._rate > 0

    @property
    def available_tokens(self) -> float:
        self._refill()
        return self._tokens

    def _refill(self) -> None:
        now = time.monotonic()
        if self._rate > 0:
            self._tokens = min(self._capacity, self._tokens + (now - self._updated_at) * self._rate)
        self._updated_at = now

    async def acquire(self, tokens: int = 1) -> float:
        """Take ``tokens`` from the bucket.

        Returns:
            Seconds spent waiting
        """
        if not self.is_limited:
            return 0.0

        waited = 0.0
        async with self._lock:
            self._refill()
            while self._tokens < tokens:
                delay = (tokens - self._tokens) / self._rate
                await asyncio.sleep(delay)
                waited += delay
                self._refill()
            self._tokens -= tokens
        return waited
