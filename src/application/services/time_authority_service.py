"""System time authority.

Production implementation of TimeAuthorityProtocol backed by the system
clock. All timestamps are timezone-aware UTC.
"""

import time
from datetime import datetime, timezone

from src.application.ports.time_authority import TimeAuthorityProtocol


class TimeAuthorityService(TimeAuthorityProtocol):
    """Wall clock and monotonic clock from the host.

    Example:
        >>> service = TimeAuthorityService()
        >>> service.now().tzinfo is not None
        True
    """

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def utcnow(self) -> datetime:
        return datetime.now(timezone.utc)

    def monotonic(self) -> float:
        return time.monotonic()
