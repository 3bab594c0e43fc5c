"""In-memory audit sink with injectable append failures."""

from __future__ import annotations

from src.application.ports.audit_sink import AuditQuery, AuditSinkProtocol
from src.domain.models.audit_event import AuditEvent


class AuditSinkStub(AuditSinkProtocol):
    """Append-only list of audit events.

    Attributes:
        append_attempts: Total append() calls, including failed ones.
    """

    def __init__(self) -> None:
        self._events: list[AuditEvent] = []
        self._failures_remaining = 0
        self.append_attempts = 0

    def clear(self) -> None:
        self._events.clear()
        self._failures_remaining = 0
        self.append_attempts = 0

    def fail_next(self, count: int = 1) -> None:
        """Make the next count append() calls raise ConnectionError."""
        self._failures_remaining = count

    @property
    def events(self) -> list[AuditEvent]:
        """Stored events in append order."""
        return list(self._events)

    async def append(self, event: AuditEvent) -> None:
        self.append_attempts += 1
        if self._failures_remaining > 0:
            self._failures_remaining -= 1
            raise ConnectionError("audit sink unavailable")
        self._events.append(event)

    async def query(self, query: AuditQuery) -> tuple[list[AuditEvent], int]:
        matches = [
            event
            for event in self._events
            if (query.event_type is None or event.event_type == query.event_type)
            and (query.actor_kind is None or event.actor_kind == query.actor_kind)
        ]
        matches.sort(key=lambda e: e.created_at, reverse=True)
        return matches[query.offset : query.offset + query.limit], len(matches)
