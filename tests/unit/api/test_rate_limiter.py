"""Unit tests for enforce_rate_limit.

Limits are keyed per (action, actor); a request over the limit raises
RateLimitExceededError carrying a positive retry delay.
"""

from datetime import timedelta

import pytest

from src.api.middleware.rate_limiter import enforce_rate_limit
from src.domain.errors.rate_limit import RateLimitExceededError
from src.infrastructure.stubs import RateLimiterStub
from tests.helpers import FakeTimeAuthority


@pytest.fixture
def limiter(fake_time: FakeTimeAuthority) -> RateLimiterStub:
    return RateLimiterStub({"vote": 1}, fake_time, window_seconds=60)


class TestEnforceRateLimit:
    """Tests for enforce_rate_limit."""

    @pytest.mark.asyncio
    async def test_under_limit(
        self, limiter: RateLimiterStub, fake_time: FakeTimeAuthority
    ) -> None:
        result = await enforce_rate_limit(limiter, fake_time, "vote", "alice")

        assert result.allowed is True

    @pytest.mark.asyncio
    async def test_over_limit_raises(
        self, limiter: RateLimiterStub, fake_time: FakeTimeAuthority
    ) -> None:
        await limiter.record("vote", "alice")
        fake_time.advance(seconds=20)

        with pytest.raises(RateLimitExceededError) as exc_info:
            await enforce_rate_limit(limiter, fake_time, "vote", "alice")

        error = exc_info.value
        assert error.retry_after_seconds == 40
        assert error.current_count == 1
        assert error.limit == 1
        assert error.reset_at == fake_time.now() + timedelta(seconds=40)

    @pytest.mark.asyncio
    async def test_retry_after_at_least_one_second(
        self, limiter: RateLimiterStub, fake_time: FakeTimeAuthority
    ) -> None:
        await limiter.record("vote", "alice")
        fake_time.advance(seconds=59.5)

        with pytest.raises(RateLimitExceededError) as exc_info:
            await enforce_rate_limit(limiter, fake_time, "vote", "alice")

        assert exc_info.value.retry_after_seconds == 1

    @pytest.mark.asyncio
    async def test_other_actor_unaffected(
        self, limiter: RateLimiterStub, fake_time: FakeTimeAuthority
    ) -> None:
        await limiter.record("vote", "alice")

        result = await enforce_rate_limit(limiter, fake_time, "vote", "bob")

        assert result.allowed is True
