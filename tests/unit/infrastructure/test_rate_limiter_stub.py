"""Unit tests for the in-memory sliding-window rate limiter."""

from datetime import timedelta

import pytest

from src.application.ports.rate_limiter import RateLimiterPort
from src.infrastructure.stubs import RateLimiterStub
from tests.helpers import FakeTimeAuthority


@pytest.fixture
def limiter(fake_time: FakeTimeAuthority) -> RateLimiterStub:
    return RateLimiterStub({"submission": 2}, fake_time, window_seconds=60)


class TestRateLimiterStub:
    """Tests for RateLimiterStub."""

    def test_satisfies_port(self, limiter: RateLimiterStub) -> None:
        assert isinstance(limiter, RateLimiterPort)

    @pytest.mark.asyncio
    async def test_allows_until_limit(self, limiter: RateLimiterStub) -> None:
        await limiter.record("submission", "alice")
        first = await limiter.check_rate_limit("submission", "alice")
        await limiter.record("submission", "alice")
        second = await limiter.check_rate_limit("submission", "alice")

        assert first.allowed is True
        assert first.remaining == 1
        assert second.allowed is False
        assert second.remaining == 0
        assert second.current_count == 2

    @pytest.mark.asyncio
    async def test_actors_counted_separately(self, limiter: RateLimiterStub) -> None:
        await limiter.record("submission", "alice")
        await limiter.record("submission", "alice")

        result = await limiter.check_rate_limit("submission", "bob")

        assert result.allowed is True

    @pytest.mark.asyncio
    async def test_window_slides(
        self, limiter: RateLimiterStub, fake_time: FakeTimeAuthority
    ) -> None:
        """Requests older than the window stop counting."""
        await limiter.record("submission", "alice")
        fake_time.advance(seconds=30)
        await limiter.record("submission", "alice")
        blocked = await limiter.check_rate_limit("submission", "alice")
        fake_time.advance(seconds=30)
        reopened = await limiter.check_rate_limit("submission", "alice")

        assert blocked.allowed is False
        assert blocked.reset_at == fake_time.now()
        assert reopened.allowed is True
        assert reopened.current_count == 1

    @pytest.mark.asyncio
    async def test_empty_window_reset(
        self, limiter: RateLimiterStub, fake_time: FakeTimeAuthority
    ) -> None:
        result = await limiter.check_rate_limit("submission", "alice")

        assert result.reset_at == fake_time.now() + timedelta(seconds=60)
        assert result.limit == 2

    @pytest.mark.asyncio
    async def test_unknown_action(self, limiter: RateLimiterStub) -> None:
        with pytest.raises(KeyError):
            await limiter.check_rate_limit("vote", "alice")
