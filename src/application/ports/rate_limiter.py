"""Rate limiter port for per-actor write limits.

Each (action, actor) pair has its own sliding window; there is no
global limiter state shared across actors.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a rate limit check.

    Attributes:
        allowed: Whether the request is under the limit.
        remaining: Requests remaining in the window.
        reset_at: When the oldest counted request leaves the window.
        current_count: Requests counted in the window.
        limit: Configured limit.
    """

    allowed: bool
    remaining: int
    reset_at: datetime
    current_count: int
    limit: int


@runtime_checkable
class RateLimiterPort(Protocol):
    """Protocol for per-actor rate limiting.

    Usage:
        result = await limiter.check_rate_limit("vote", actor_id)
        if not result.allowed:
            raise RateLimitExceededError(...)
        # After the write succeeds:
        await limiter.record("vote", actor_id)
    """

    async def check_rate_limit(self, action: str, actor_id: str) -> RateLimitResult:
        """Check the actor's window for an action without recording."""
        ...

    async def record(self, action: str, actor_id: str) -> None:
        """Count a successful request. Call only after the write succeeded."""
        ...
