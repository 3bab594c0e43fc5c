"""Audit event model for the append-only audit trail."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from uuid6 import uuid7


class AuditEventType(Enum):
    SUBMISSION_CREATED = "submission_created"
    SUBMISSION_SCREENED = "submission_screened"
    REFINEMENT_COMPLETED = "refinement_completed"
    VOTING_CREATED = "voting_created"
    VOTE_CAST = "vote_cast"
    CONTENT_PLACED = "content_placed"
    REVISION_PROPOSED = "revision_proposed"
    REVISION_APPROVED = "revision_approved"
    CONSTITUTION_CHECK = "constitution_check"
    DISCUSSION_CREATED = "discussion_created"


class ActorKind(Enum):
    HUMAN = "human"
    AI = "ai"
    SYSTEM = "system"


@dataclass(frozen=True, eq=True)
class AuditEvent:
    """One state transition in the audit trail.

    Attributes:
        id: UUIDv7 identifier.
        event_type: What happened.
        actor_kind: human / ai / system.
        actor_id: Actor id, when one is known.
        subject_type: Kind of subject ("submission", "voting_session", ...).
        subject_id: Subject identifier.
        details: Free-form structured details.
        created_at: When the transition happened.
    """

    id: UUID
    event_type: AuditEventType
    actor_kind: ActorKind
    actor_id: str | None
    subject_type: str
    subject_id: str
    created_at: datetime
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        event_type: AuditEventType,
        actor_kind: ActorKind,
        subject_type: str,
        subject_id: UUID | str,
        created_at: datetime,
        actor_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> AuditEvent:
        return cls(
            id=uuid7(),
            event_type=event_type,
            actor_kind=actor_kind,
            actor_id=actor_id,
            subject_type=subject_type,
            subject_id=str(subject_id),
            created_at=created_at,
            details=dict(details or {}),
        )
