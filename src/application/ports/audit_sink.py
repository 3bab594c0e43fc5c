"""Append-only audit sink port."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from src.domain.models.audit_event import ActorKind, AuditEvent, AuditEventType

DEFAULT_AUDIT_PAGE_SIZE = 20
MAX_AUDIT_PAGE_SIZE = 100


@dataclass(frozen=True)
class AuditQuery:
    """Filters and pagination for audit trail reads.

    Attributes:
        event_type: Only events of this type.
        actor_kind: Only events by this kind of actor.
        limit: Page size, capped at MAX_AUDIT_PAGE_SIZE.
        offset: Rows to skip.
    """

    event_type: AuditEventType | None = None
    actor_kind: ActorKind | None = None
    limit: int = DEFAULT_AUDIT_PAGE_SIZE
    offset: int = 0

    def __post_init__(self) -> None:
        if self.limit < 1:
            raise ValueError(f"limit must be positive, got {self.limit}")
        if self.offset < 0:
            raise ValueError(f"offset must be non-negative, got {self.offset}")
        if self.limit > MAX_AUDIT_PAGE_SIZE:
            object.__setattr__(self, "limit", MAX_AUDIT_PAGE_SIZE)


class AuditSinkProtocol(Protocol):
    """Protocol for audit persistence."""

    async def append(self, event: AuditEvent) -> None:
        """Append an event. Events are never modified."""
        ...

    async def query(self, query: AuditQuery) -> tuple[list[AuditEvent], int]:
        """Return a page of events, newest first, and the total match count."""
        ...
