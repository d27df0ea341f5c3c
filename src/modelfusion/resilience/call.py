"""
Combined retry and throttle execution of a single API call.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

from modelfusion.resilience.retry import retry_with_exponential_backoff
from modelfusion.resilience.throttle import throttle_off

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from modelfusion.resilience.retry import RetryFunction
    from modelfusion.resilience.throttle import ThrottleFunction

T = TypeVar("T")


async def call_with_retry_and_throttle(
    call: Callable[[], Awaitable[T]],
    *,
    retry: RetryFunction | None = None,
    throttle: ThrottleFunction | None = None,
) -> T:
    """Execute ``call`` under a throttle, retrying according to ``retry``.

    Every attempt passes through the throttle separately, so a waiting
    retry does not hold a throttle slot.

    Args:
        call: The API call
        retry: Retry function (default: exponential backoff, 3 tries)
        throttle: Throttle function (default: no throttling)

    Returns:
        The call result
    """
    retry = retry or retry_with_exponential_backoff()
    throttle = throttle or throttle_off()
    return await retry(lambda: throttle(call))
