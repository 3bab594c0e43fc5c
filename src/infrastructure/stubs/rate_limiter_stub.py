"""Sliding-window rate limiter kept in process memory.

Counts requests per (action, actor) over the configured window. Suitable
for a single API process and for tests; limits are not shared between
processes.
"""

from __future__ import annotations

from collections import deque
from datetime import datetime, timedelta

from src.application.ports.rate_limiter import RateLimitResult
from src.application.ports.time_authority import TimeAuthorityProtocol


class RateLimiterStub:
    """In-memory implementation of RateLimiterPort.

    Attributes:
        _limits: Requests allowed per window, keyed by action.
        _window: Sliding window length.
        _hits: Request timestamps per (action, actor).
    """

    def __init__(
        self,
        limits: dict[str, int],
        time_authority: TimeAuthorityProtocol,
        window_seconds: int = 60,
    ) -> None:
        self._limits = dict(limits)
        self._time = time_authority
        self._window = timedelta(seconds=window_seconds)
        self._hits: dict[tuple[str, str], deque[datetime]] = {}

    def clear(self) -> None:
        self._hits.clear()

    def get_limit(self, action: str) -> int:
        """Configured limit for an action.

        Raises:
            KeyError: Unknown action.
        """
        return self._limits[action]

    async def check_rate_limit(self, action: str, actor_id: str) -> RateLimitResult:
        now = self._time.now()
        limit = self.get_limit(action)
        hits = self._prune((action, actor_id), now)
        current = len(hits)
        reset_at = hits[0] + self._window if hits else now + self._window
        return RateLimitResult(
            allowed=current < limit,
            remaining=max(0, limit - current),
            reset_at=reset_at,
            current_count=current,
            limit=limit,
        )

    async def record(self, action: str, actor_id: str) -> None:
        now = self._time.now()
        self._prune((action, actor_id), now).append(now)

    def _prune(self, key: tuple[str, str], now: datetime) -> deque[datetime]:
        hits = self._hits.setdefault(key, deque())
        cutoff = now - self._window
        while hits and hits[0] <= cutoff:
            hits.popleft()
        return hits
