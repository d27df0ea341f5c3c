"""Tests for resilience module."""

import asyncio

import pytest

from modelfusion.errors import AbortError, ApiCallError, RetryError, RetryReason
from modelfusion.resilience import (
    JitterStrategy,
    RateLimiter,
    RateLimiterConfig,
    RetryConfig,
    call_with_retry_and_throttle,
    retry_never,
    retry_with_exponential_backoff,
    throttle_max_concurrency,
    throttle_off,
    throttle_rate_limit,
)


def _retryable_error(message: str = "overloaded") -> ApiCallError:
    return ApiCallError(message, url="https://api.test/v1", status_code=503)


class FlakyCall:
    """Fails a fixed number of times before returning a value."""

    def __init__(self, failures: list[Exception], value: str = "ok") -> None:
        self.failures = list(failures)
        self.value = value
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.failures:
            raise self.failures.pop(0)
        return self.value


class TestRetryConfig:
    """Tests for RetryConfig."""

    def test_default_config(self) -> None:
        """Test default retry configuration."""
        config = RetryConfig()
        assert config.max_tries == 3
        assert config.initial_delay_ms == 2000
        assert config.backoff_factor == 2.0
        assert config.jitter == JitterStrategy.NONE

    def test_from_dict(self) -> None:
        """Test creating config from a mapping."""
        config = RetryConfig.from_dict({"max_tries": 5, "initial_delay_ms": 100, "jitter": "full"})
        assert config.max_tries == 5
        assert config.initial_delay_ms == 100
        assert config.jitter == JitterStrategy.FULL

    def test_from_dict_unknown_jitter(self) -> None:
        """Test that unknown jitter falls back to none."""
        assert RetryConfig.from_dict({"jitter": "weird"}).jitter == JitterStrategy.NONE
        assert RetryConfig.from_dict(None) == RetryConfig()

    def test_calculate_delay_exponential(self) -> None:
        """Test exponential backoff calculation."""
        config = RetryConfig(initial_delay_ms=1000, backoff_factor=2.0)
        assert config.calculate_delay(1) == 1.0
        assert config.calculate_delay(2) == 2.0
        assert config.calculate_delay(3) == 4.0

    def test_calculate_delay_capped(self) -> None:
        """Test that delays are capped at max_delay_ms."""
        config = RetryConfig(initial_delay_ms=1000, max_delay_ms=3000)
        assert config.calculate_delay(10) == 3.0

    def test_retry_after_wins(self) -> None:
        """Test that a server retry-after hint is used as is."""
        config = RetryConfig(initial_delay_ms=1000)
        assert config.calculate_delay(1, retry_after=7.5) == 7.5

    def test_full_jitter_bounds(self) -> None:
        """Test full jitter stays within [0, base]."""
        config = RetryConfig(initial_delay_ms=1000, jitter=JitterStrategy.FULL)
        for _ in range(20):
            assert 0.0 <= config.calculate_delay(1) <= 1.0


class TestRetryWithExponentialBackoff:
    """Tests for retry_with_exponential_backoff."""

    @pytest.mark.asyncio
    async def test_success_first_try(self) -> None:
        """Test that a successful call is not retried."""
        call = FlakyCall([])
        retry = retry_with_exponential_backoff(initial_delay_ms=1)
        assert await retry(call) == "ok"
        assert call.calls == 1

    @pytest.mark.asyncio
    async def test_retries_retryable_errors(self) -> None:
        """Test that retryable errors are retried until success."""
        call = FlakyCall([_retryable_error(), _retryable_error()])
        retried: list[int] = []
        retry = retry_with_exponential_backoff(
            max_tries=3,
            initial_delay_ms=1,
            on_retry=lambda try_number, error, delay: retried.append(try_number),
        )
        assert await retry(call) == "ok"
        assert call.calls == 3
        assert retried == [1, 2]

    @pytest.mark.asyncio
    async def test_max_tries_exceeded(self) -> None:
        """Test RetryError once every try has failed."""
        errors = [_retryable_error("a"), _retryable_error("b"), _retryable_error("c")]
        call = FlakyCall(list(errors))
        retry = retry_with_exponential_backoff(max_tries=3, initial_delay_ms=1)

        with pytest.raises(RetryError) as exc_info:
            await retry(call)

        assert exc_info.value.reason == RetryReason.MAX_TRIES_EXCEEDED
        assert exc_info.value.errors == errors
        assert exc_info.value.last_error is errors[-1]
        assert call.calls == 3

    @pytest.mark.asyncio
    async def test_non_retryable_first_try_propagates(self) -> None:
        """Test that a non-retryable first error is raised unchanged."""
        error = ApiCallError("bad request", url="u", status_code=400)
        call = FlakyCall([error])
        retry = retry_with_exponential_backoff(initial_delay_ms=1)

        with pytest.raises(ApiCallError) as exc_info:
            await retry(call)

        assert exc_info.value is error
        assert call.calls == 1

    @pytest.mark.asyncio
    async def test_non_retryable_later_try_wrapped(self) -> None:
        """Test that a non-retryable error after retries is wrapped."""
        call = FlakyCall([_retryable_error(), ValueError("broken")])
        retry = retry_with_exponential_backoff(max_tries=5, initial_delay_ms=1)

        with pytest.raises(RetryError) as exc_info:
            await retry(call)

        assert exc_info.value.reason == RetryReason.ERROR_NOT_RETRYABLE
        assert len(exc_info.value.errors) == 2
        assert call.calls == 2

    @pytest.mark.asyncio
    async def test_waits_for_retry_after(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that the delay requested by the provider is slept between tries."""
        delays: list[float] = []

        async def fake_sleep(delay: float) -> None:
            delays.append(delay)

        monkeypatch.setattr("modelfusion.resilience.retry.asyncio.sleep", fake_sleep)
        error = ApiCallError("rate limited", url="u", status_code=429, retry_after=7.5)
        call = FlakyCall([error])
        retry = retry_with_exponential_backoff(max_tries=2, initial_delay_ms=1)

        assert await retry(call) == "ok"
        assert delays == [7.5]
        assert call.calls == 2

    @pytest.mark.asyncio
    async def test_abort_not_retried(self) -> None:
        """Test that AbortError propagates immediately."""
        call = FlakyCall([AbortError()])
        retry = retry_with_exponential_backoff(initial_delay_ms=1)

        with pytest.raises(AbortError):
            await retry(call)
        assert call.calls == 1

    @pytest.mark.asyncio
    async def test_retry_never(self) -> None:
        """Test that retry_never calls exactly once."""
        call = FlakyCall([_retryable_error()])
        with pytest.raises(ApiCallError):
            await retry_never()(call)
        assert call.calls == 1


class TestThrottle:
    """Tests for throttle functions."""

    @pytest.mark.asyncio
    async def test_throttle_off(self) -> None:
        """Test that throttle_off passes through."""
        assert await throttle_off()(FlakyCall([])) == "ok"

    @pytest.mark.asyncio
    async def test_max_concurrency(self) -> None:
        """Test that at most N calls run at the same time."""
        throttle = throttle_max_concurrency(2)
        running = 0
        peak = 0

        async def work() -> int:
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.01)
            running -= 1
            return 1

        results = await asyncio.gather(*(throttle(work) for _ in range(6)))
        assert sum(results) == 6
        assert peak == 2
        assert throttle.active_calls == 0

    def test_max_concurrency_validation(self) -> None:
        """Test that max concurrency must be positive."""
        with pytest.raises(ValueError):
            throttle_max_concurrency(0)

    @pytest.mark.asyncio
    async def test_rate_limit_allows_burst(self) -> None:
        """Test that calls within the burst start immediately."""
        throttle = throttle_rate_limit(1000, burst_size=5)
        results = [await throttle(FlakyCall([])) for _ in range(5)]
        assert results == ["ok"] * 5


class TestRateLimiter:
    """Tests for RateLimiter."""

    def test_config_from_rpm(self) -> None:
        """Test creating config from requests per minute."""
        config = RateLimiterConfig.from_rpm(120)
        assert config.requests_per_second == 2.0
        assert config.burst_size == 3

    def test_unlimited(self) -> None:
        """Test that rate 0 disables limiting."""
        assert not RateLimiter(RateLimiterConfig()).is_limited

    @pytest.mark.asyncio
    async def test_acquire_within_burst(self) -> None:
        """Test acquiring tokens without waiting."""
        limiter = RateLimiter(RateLimiterConfig(requests_per_second=10, burst_size=2))
        assert await limiter.acquire() == 0.0
        assert limiter.available_tokens < 2


class TestCallWithRetryAndThrottle:
    """Tests for call_with_retry_and_throttle."""

    @pytest.mark.asyncio
    async def test_defaults(self) -> None:
        """Test the default retry and throttle."""
        assert await call_with_retry_and_throttle(FlakyCall([])) == "ok"

    @pytest.mark.asyncio
    async def test_throttle_applied_per_try(self) -> None:
        """Test that every try passes through the throttle."""
        throttled = 0

        async def counting_throttle(fn):  # type: ignore[no-untyped-def]
            nonlocal throttled
            throttled += 1
            return await fn()

        call = FlakyCall([_retryable_error()])
        result = await call_with_retry_and_throttle(
            call,
            retry=retry_with_exponential_backoff(max_tries=2, initial_delay_ms=1),
            throttle=counting_throttle,
        )
        assert result == "ok"
        assert throttled == 2
