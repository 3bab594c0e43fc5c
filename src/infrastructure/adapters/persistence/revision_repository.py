"""PostgreSQL revision workflow repository."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.domain.errors.revision import RevisionNotFoundError
from src.domain.models.revision_proposal import (
    CooldownRecord,
    CouncilMember,
    DiscussionAuthorKind,
    DiscussionEntry,
    RevisionProposal,
    RevisionStatus,
)

_PROPOSAL_COLUMNS = """
    id, entry_id, proposer_id, original_text, proposed_text, rationale, status,
    compliance_score, discussion_ends_at, voting_session_id, rejection_count,
    cooldown_until, rejection_reason, created_at, updated_at
"""


def _proposal_params(proposal: RevisionProposal) -> dict[str, Any]:
    return {
        "id": proposal.id,
        "entry_id": proposal.entry_id,
        "proposer_id": proposal.proposer_id,
        "original_text": proposal.original_text,
        "proposed_text": proposal.proposed_text,
        "rationale": proposal.rationale,
        "status": proposal.status.value,
        "compliance_score": proposal.compliance_score,
        "discussion_ends_at": proposal.discussion_ends_at,
        "voting_session_id": proposal.voting_session_id,
        "rejection_count": proposal.rejection_count,
        "cooldown_until": proposal.cooldown_until,
        "rejection_reason": proposal.rejection_reason,
        "created_at": proposal.created_at,
        "updated_at": proposal.updated_at,
    }


def _row_to_proposal(row: Mapping[str, Any]) -> RevisionProposal:
    session_id = row["voting_session_id"]
    return RevisionProposal(
        id=UUID(str(row["id"])),
        entry_id=row["entry_id"],
        proposer_id=row["proposer_id"],
        original_text=row["original_text"],
        proposed_text=row["proposed_text"],
        rationale=row["rationale"],
        status=RevisionStatus(row["status"]),
        compliance_score=row["compliance_score"],
        discussion_ends_at=row["discussion_ends_at"],
        voting_session_id=UUID(str(session_id)) if session_id else None,
        rejection_count=row["rejection_count"],
        cooldown_until=row["cooldown_until"],
        rejection_reason=row["rejection_reason"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class PostgresRevisionRepository:
    """RevisionRepositoryProtocol over the revision tables."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def save(self, proposal: RevisionProposal) -> None:
        async with self._session_factory() as session, session.begin():
            await session.execute(
                text(f"""
                    INSERT INTO revision_proposals ({_PROPOSAL_COLUMNS})
                    VALUES (
                        :id, :entry_id, :proposer_id, :original_text,
                        :proposed_text, :rationale, :status, :compliance_score,
                        :discussion_ends_at, :voting_session_id, :rejection_count,
                        :cooldown_until, :rejection_reason, :created_at, :updated_at
                    )
                """),
                _proposal_params(proposal),
            )

    async def get(self, proposal_id: UUID) -> RevisionProposal | None:
        async with self._session_factory() as session:
            result = await session.execute(
                text(f"SELECT {_PROPOSAL_COLUMNS} FROM revision_proposals WHERE id = :id"),
                {"id": proposal_id},
            )
            row = result.mappings().first()
            return _row_to_proposal(row) if row else None

    async def update(self, proposal: RevisionProposal) -> None:
        async with self._session_factory() as session, session.begin():
            result = await session.execute(
                text("""
                    UPDATE revision_proposals SET
                        status = :status,
                        compliance_score = :compliance_score,
                        discussion_ends_at = :discussion_ends_at,
                        voting_session_id = :voting_session_id,
                        rejection_count = :rejection_count,
                        cooldown_until = :cooldown_until,
                        rejection_reason = :rejection_reason,
                        updated_at = :updated_at
                    WHERE id = :id
                """),
                _proposal_params(proposal),
            )
            if result.rowcount == 0:
                raise RevisionNotFoundError(proposal.id)

    async def get_cooldown(self, entry_id: str, proposer_id: str) -> CooldownRecord | None:
        async with self._session_factory() as session:
            result = await session.execute(
                text("""
                    SELECT entry_id, proposer_id, rejection_count, cooldown_until
                    FROM revision_cooldowns
                    WHERE entry_id = :entry_id AND proposer_id = :proposer_id
                """),
                {"entry_id": entry_id, "proposer_id": proposer_id},
            )
            row = result.mappings().first()
            if row is None:
                return None
            return CooldownRecord(
                entry_id=row["entry_id"],
                proposer_id=row["proposer_id"],
                rejection_count=row["rejection_count"],
                cooldown_until=row["cooldown_until"],
            )

    async def upsert_cooldown(self, record: CooldownRecord) -> None:
        async with self._session_factory() as session, session.begin():
            await session.execute(
                text("""
                    INSERT INTO revision_cooldowns
                        (entry_id, proposer_id, rejection_count, cooldown_until)
                    VALUES
                        (:entry_id, :proposer_id, :rejection_count, :cooldown_until)
                    ON CONFLICT (entry_id, proposer_id) DO UPDATE SET
                        rejection_count = EXCLUDED.rejection_count,
                        cooldown_until = EXCLUDED.cooldown_until
                """),
                {
                    "entry_id": record.entry_id,
                    "proposer_id": record.proposer_id,
                    "rejection_count": record.rejection_count,
                    "cooldown_until": record.cooldown_until,
                },
            )

    async def add_discussion_entry(self, entry: DiscussionEntry) -> None:
        async with self._session_factory() as session, session.begin():
            await session.execute(
                text("""
                    INSERT INTO discussion_entries (
                        id, proposal_id, author_kind, author_id, content,
                        is_ai_analysis, created_at
                    ) VALUES (
                        :id, :proposal_id, :author_kind, :author_id, :content,
                        :is_ai_analysis, :created_at
                    )
                """),
                {
                    "id": entry.id,
                    "proposal_id": entry.proposal_id,
                    "author_kind": entry.author_kind.value,
                    "author_id": entry.author_id,
                    "content": entry.content,
                    "is_ai_analysis": entry.is_ai_analysis,
                    "created_at": entry.created_at,
                },
            )

    async def list_discussion(self, proposal_id: UUID) -> list[DiscussionEntry]:
        async with self._session_factory() as session:
            result = await session.execute(
                text("""
                    SELECT id, proposal_id, author_kind, author_id, content,
                           is_ai_analysis, created_at
                    FROM discussion_entries
                    WHERE proposal_id = :proposal_id
                    ORDER BY created_at ASC, id ASC
                """),
                {"proposal_id": proposal_id},
            )
            return [
                DiscussionEntry(
                    id=UUID(str(row["id"])),
                    proposal_id=UUID(str(row["proposal_id"])),
                    author_kind=DiscussionAuthorKind(row["author_kind"]),
                    author_id=row["author_id"],
                    content=row["content"],
                    is_ai_analysis=row["is_ai_analysis"],
                    created_at=row["created_at"],
                )
                for row in result.mappings()
            ]

    async def list_active_council_members(self) -> list[CouncilMember]:
        async with self._session_factory() as session:
            result = await session.execute(
                text("""
                    SELECT id, name, perspective, is_active
                    FROM council_members
                    WHERE is_active
                    ORDER BY id ASC
                """)
            )
            return [
                CouncilMember(
                    id=row["id"],
                    name=row["name"],
                    perspective=row["perspective"],
                    is_active=row["is_active"],
                )
                for row in result.mappings()
            ]
