"""PostgreSQL audit sink. The table rejects UPDATE and DELETE."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.application.ports.audit_sink import AuditQuery
from src.domain.models.audit_event import ActorKind, AuditEvent, AuditEventType
from src.infrastructure.adapters.persistence.json_columns import dump_json, load_json

_FILTERS = """
    WHERE (CAST(:event_type AS TEXT) IS NULL OR event_type = :event_type)
      AND (CAST(:actor_kind AS TEXT) IS NULL OR actor_kind = :actor_kind)
"""


def _row_to_event(row: Mapping[str, Any]) -> AuditEvent:
    return AuditEvent(
        id=UUID(str(row["id"])),
        event_type=AuditEventType(row["event_type"]),
        actor_kind=ActorKind(row["actor_kind"]),
        actor_id=row["actor_id"],
        subject_type=row["subject_type"],
        subject_id=row["subject_id"],
        details=dict(load_json(row["details"]) or {}),
        created_at=row["created_at"],
    )


class PostgresAuditSink:
    """AuditSinkProtocol over the audit_events table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def append(self, event: AuditEvent) -> None:
        async with self._session_factory() as session, session.begin():
            await session.execute(
                text("""
                    INSERT INTO audit_events (
                        id, event_type, actor_kind, actor_id, subject_type,
                        subject_id, details, created_at
                    ) VALUES (
                        :id, :event_type, :actor_kind, :actor_id, :subject_type,
                        :subject_id, CAST(:details AS JSONB), :created_at
                    )
                    ON CONFLICT (id) DO NOTHING
                """),
                {
                    "id": event.id,
                    "event_type": event.event_type.value,
                    "actor_kind": event.actor_kind.value,
                    "actor_id": event.actor_id,
                    "subject_type": event.subject_type,
                    "subject_id": event.subject_id,
                    "details": dump_json(event.details),
                    "created_at": event.created_at,
                },
            )

    async def query(self, query: AuditQuery) -> tuple[list[AuditEvent], int]:
        params: dict[str, Any] = {
            "event_type": query.event_type.value if query.event_type else None,
            "actor_kind": query.actor_kind.value if query.actor_kind else None,
            "limit": query.limit,
            "offset": query.offset,
        }
        async with self._session_factory() as session:
            total = await session.execute(
                text(f"SELECT COUNT(*) FROM audit_events {_FILTERS}"), params
            )
            result = await session.execute(
                text(f"""
                    SELECT id, event_type, actor_kind, actor_id, subject_type,
                           subject_id, details, created_at
                    FROM audit_events
                    {_FILTERS}
                    ORDER BY created_at DESC, id DESC
                    LIMIT :limit OFFSET :offset
                """),
                params,
            )
            return [_row_to_event(row) for row in result.mappings()], int(
                total.scalar() or 0
            )
