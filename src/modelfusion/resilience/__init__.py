"""
Resilience layer - retry, throttling and rate limiting for API calls.

- Retry functions: exponential backoff with optional jitter, or never
- Throttle functions: max concurrency, rate limit, or off
- call_with_retry_and_throttle: the combination used by every API call
"""

from modelfusion.resilience.call import call_with_retry_and_throttle
from modelfusion.resilience.rate_limiter import RateLimiter, RateLimiterConfig
from modelfusion.resilience.retry import (
    JitterStrategy,
    RetryConfig,
    RetryFunction,
    retry_never,
    retry_with_exponential_backoff,
)
from modelfusion.resilience.throttle import (
    ThrottleFunction,
    throttle_max_concurrency,
    throttle_off,
    throttle_rate_limit,
)

__all__ = [
    # Retry
    "JitterStrategy",
    # Rate limiting
    "RateLimiter",
    "RateLimiterConfig",
    "RetryConfig",
    "RetryFunction",
    # Throttle
    "ThrottleFunction",
    "call_with_retry_and_throttle",
    "retry_never",
    "retry_with_exponential_backoff",
    "throttle_max_concurrency",
    "throttle_off",
    "throttle_rate_limit",
]
