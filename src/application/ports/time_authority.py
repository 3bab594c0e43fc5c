"""Time authority port.

Services that need the current time inject a TimeAuthorityProtocol
instead of calling datetime.now() directly, so voting windows, discussion
windows and cooldowns can be exercised deterministically.
"""

from abc import ABC, abstractmethod
from datetime import datetime


class TimeAuthorityProtocol(ABC):
    """Abstract source of timestamps.

    Example usage:
        class MyService:
            def __init__(self, time_authority: TimeAuthorityProtocol) -> None:
                self._time = time_authority

            def process(self) -> None:
                now = self._time.utcnow()
    """

    @abstractmethod
    def now(self) -> datetime:
        """Return the current time, timezone aware."""
        ...

    @abstractmethod
    def utcnow(self) -> datetime:
        """Return the current UTC time, timezone aware."""
        ...

    @abstractmethod
    def monotonic(self) -> float:
        """Return a monotonic clock value for measuring elapsed time."""
        ...
