"""Rate limit errors for per-actor write limits.

Limits are keyed per (action, actor) so one busy actor never throttles
another.
"""

from datetime import datetime

from src.domain.exceptions import GovernanceError


class RateLimitExceededError(GovernanceError):
    """Raised when an actor exceeds the write limit for an action.

    This error triggers a 429 response with Retry-After header.

    Attributes:
        action: The limited action ("submission" or "vote").
        actor_id: The rate-limited actor.
        current_count: Requests in the current window.
        limit: Configured maximum per window.
        reset_at: UTC datetime when the oldest request leaves the window.
        retry_after_seconds: Suggested retry delay in seconds.
    """

    def __init__(
        self,
        action: str,
        actor_id: str,
        current_count: int,
        limit: int,
        reset_at: datetime,
        retry_after_seconds: int = 60,
    ) -> None:
        """Initialize rate limit exceeded error.

        Args:
            action: The limited action.
            actor_id: The actor hitting the limit.
            current_count: Request count in window.
            limit: Maximum requests allowed per window.
            reset_at: UTC datetime when the rate limit resets.
            retry_after_seconds: Suggested client retry delay.
        """
        self.action = action
        self.actor_id = actor_id
        self.current_count = current_count
        self.limit = limit
        self.reset_at = reset_at
        self.retry_after_seconds = retry_after_seconds
        super().__init__(
            f"Rate limit exceeded for {action} by {actor_id}: "
            f"{current_count}/{limit}. Resets at {reset_at.isoformat()}."
        )
