"""Per-actor write rate limiting for API routes.

Limits are keyed per (action, actor); one busy actor never throttles
another. A request is counted only after its write succeeds.
"""

from __future__ import annotations

import math

from src.application.ports.rate_limiter import RateLimiterPort, RateLimitResult
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.domain.errors.rate_limit import RateLimitExceededError


async def enforce_rate_limit(
    limiter: RateLimiterPort,
    time_authority: TimeAuthorityProtocol,
    action: str,
    actor_id: str,
) -> RateLimitResult:
    """Check the actor's window for an action.

    Raises:
        RateLimitExceededError: The actor is at the limit.
    """
    result = await limiter.check_rate_limit(action, actor_id)
    if not result.allowed:
        wait = (result.reset_at - time_authority.now()).total_seconds()
        raise RateLimitExceededError(
            action=action,
            actor_id=actor_id,
            current_count=result.current_count,
            limit=result.limit,
            reset_at=result.reset_at,
            retry_after_seconds=max(1, math.ceil(wait)),
        )
    return result
