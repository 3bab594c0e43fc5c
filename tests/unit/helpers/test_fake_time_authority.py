"""Unit tests for the FakeTimeAuthority test helper."""

from datetime import datetime, timedelta, timezone

import pytest

from src.application.ports.time_authority import TimeAuthorityProtocol
from tests.helpers.fake_time_authority import DEFAULT_FROZEN_AT, FakeTimeAuthority


class TestFrozenClock:
    """Time stays where it was put."""

    def test_default_start(self) -> None:
        fake_time = FakeTimeAuthority()

        assert isinstance(fake_time, TimeAuthorityProtocol)
        assert fake_time.now() == DEFAULT_FROZEN_AT
        assert fake_time.utcnow() == fake_time.now()
        assert fake_time.monotonic() == 0.0

    def test_naive_start_taken_as_utc(self) -> None:
        fake_time = FakeTimeAuthority(frozen_at=datetime(2026, 3, 1, 12, 0))

        assert fake_time.now().tzinfo == timezone.utc

    def test_fixture_is_frozen(self, fake_time: FakeTimeAuthority) -> None:
        assert fake_time.now() == fake_time.now() == DEFAULT_FROZEN_AT


class TestAdvance:
    """Tests for advance()."""

    def test_seconds_and_delta(self) -> None:
        fake_time = FakeTimeAuthority()

        fake_time.advance(seconds=90)
        fake_time.advance(delta=timedelta(days=7))

        assert fake_time.now() == DEFAULT_FROZEN_AT + timedelta(days=7, seconds=90)
        assert fake_time.monotonic() == pytest.approx(7 * 86400 + 90)

    def test_delta_wins_over_seconds(self) -> None:
        fake_time = FakeTimeAuthority()

        fake_time.advance(seconds=5, delta=timedelta(minutes=1))

        assert fake_time.now() == DEFAULT_FROZEN_AT + timedelta(minutes=1)

    @pytest.mark.parametrize(
        "kwargs",
        [{}, {"seconds": -1}, {"delta": timedelta(seconds=-1)}],
    )
    def test_invalid_amounts_rejected(self, kwargs: dict) -> None:
        fake_time = FakeTimeAuthority()

        with pytest.raises(ValueError):
            fake_time.advance(**kwargs)

        assert fake_time.now() == DEFAULT_FROZEN_AT


class TestSetTime:
    """Tests for set_time()."""

    def test_jumps_without_moving_monotonic(self) -> None:
        fake_time = FakeTimeAuthority(start_monotonic=10.0)
        target = datetime(2026, 6, 1, tzinfo=timezone.utc)

        fake_time.set_time(target)

        assert fake_time.now() == target
        assert fake_time.monotonic() == 10.0

    def test_repr_shows_time(self) -> None:
        assert "2026-01-01T00:00:00+00:00" in repr(FakeTimeAuthority())
