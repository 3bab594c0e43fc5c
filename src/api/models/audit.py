"""Audit trail API response models."""

from typing import Any
from uuid import UUID

from pydantic import BaseModel

from src.api.models.common import DateTimeWithZ


class AuditEventResponse(BaseModel):
    id: UUID
    event_type: str
    actor_kind: str
    actor_id: str | None
    subject_type: str
    subject_id: str
    details: dict[str, Any]
    created_at: DateTimeWithZ


class AuditPageResponse(BaseModel):
    """One page of the audit trail, newest first."""

    events: list[AuditEventResponse]
    total: int
    limit: int
    offset: int
