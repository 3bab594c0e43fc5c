"""PostgreSQL voting repository.

Vote insertion and the counter increment share one transaction with the
session row locked. The status and window are checked under that lock, so
a vote never lands on a session that has started tallying, and counters
always equal the stored votes. The unique (session_id, voter_kind,
voter_id) constraint rejects duplicates and the partial unique index
rejects a second open session per subject.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.domain.errors.voting import (
    ActiveSessionExistsError,
    DuplicateVoteError,
    InvalidSessionStateError,
    VotingSessionNotFoundError,
    VotingWindowClosedError,
)
from src.domain.models.automated_voter import (
    AutomatedVoter,
    PanelJudgment,
    Perspective,
    PerspectiveCategory,
)
from src.domain.models.vote import Vote, VoteChoice, VoterKind
from src.domain.models.voting_session import (
    SessionStatus,
    SubjectType,
    VoteCounters,
    VotingSession,
)

_SESSION_COLUMNS = """
    id, subject_id, subject_type, title, approval_threshold, quorum_fraction,
    eligible_human_count, status, starts_at, ends_at, human_for, human_against,
    human_abstain, automated_for, automated_against, automated_abstain,
    automated_panel_size, flag_reason
"""


def _row_to_session(row: Mapping[str, Any]) -> VotingSession:
    return VotingSession(
        id=UUID(str(row["id"])),
        subject_id=UUID(str(row["subject_id"])),
        subject_type=SubjectType(row["subject_type"]),
        title=row["title"],
        approval_threshold=row["approval_threshold"],
        quorum_fraction=row["quorum_fraction"],
        eligible_human_count=row["eligible_human_count"],
        status=SessionStatus(row["status"]),
        starts_at=row["starts_at"],
        ends_at=row["ends_at"],
        counters=VoteCounters(
            human_for=row["human_for"],
            human_against=row["human_against"],
            human_abstain=row["human_abstain"],
            automated_for=row["automated_for"],
            automated_against=row["automated_against"],
            automated_abstain=row["automated_abstain"],
        ),
        automated_panel_size=row["automated_panel_size"],
        flag_reason=row["flag_reason"],
    )


def _row_to_vote(row: Mapping[str, Any]) -> Vote:
    return Vote(
        id=UUID(str(row["id"])),
        session_id=UUID(str(row["session_id"])),
        voter_kind=VoterKind(row["voter_kind"]),
        voter_id=row["voter_id"],
        choice=VoteChoice(row["choice"]),
        rationale=row["rationale"],
        cast_at=row["cast_at"],
    )


def _row_to_voter(row: Mapping[str, Any]) -> AutomatedVoter:
    return AutomatedVoter(
        id=UUID(str(row["id"])),
        session_id=UUID(str(row["session_id"])),
        perspective=Perspective(
            category=PerspectiveCategory(row["category"]),
            name=row["perspective_name"],
            name_ko=row["perspective_name_ko"],
            focus=row["focus"],
        ),
        judgment=PanelJudgment(
            vote=VoteChoice(row["vote"]),
            reasoning=row["reasoning"],
            confidence=row["confidence"],
        ),
        evaluation_failed=row["evaluation_failed"],
        created_at=row["created_at"],
    )


def _counter_column(kind: VoterKind, choice: VoteChoice) -> str:
    prefix = "human" if kind == VoterKind.HUMAN else "automated"
    return f"{prefix}_{choice.value}"


class PostgresVotingRepository:
    """VotingRepositoryProtocol over the voting tables."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def create_session(self, session: VotingSession) -> None:
        try:
            async with self._session_factory() as db, db.begin():
                await db.execute(
                    text("""
                        INSERT INTO voting_sessions (
                            id, subject_id, subject_type, title,
                            approval_threshold, quorum_fraction,
                            eligible_human_count, status, starts_at, ends_at,
                            automated_panel_size, flag_reason
                        ) VALUES (
                            :id, :subject_id, :subject_type, :title,
                            :approval_threshold, :quorum_fraction,
                            :eligible_human_count, :status, :starts_at, :ends_at,
                            :automated_panel_size, :flag_reason
                        )
                    """),
                    {
                        "id": session.id,
                        "subject_id": session.subject_id,
                        "subject_type": session.subject_type.value,
                        "title": session.title,
                        "approval_threshold": session.approval_threshold,
                        "quorum_fraction": session.quorum_fraction,
                        "eligible_human_count": session.eligible_human_count,
                        "status": session.status.value,
                        "starts_at": session.starts_at,
                        "ends_at": session.ends_at,
                        "automated_panel_size": session.automated_panel_size,
                        "flag_reason": session.flag_reason,
                    },
                )
        except IntegrityError as e:
            existing = await self.get_open_session_for_subject(session.subject_id)
            if existing is None:
                raise
            raise ActiveSessionExistsError(session.subject_id, existing.id) from e

    async def get_session(self, session_id: UUID) -> VotingSession | None:
        async with self._session_factory() as db:
            result = await db.execute(
                text(f"SELECT {_SESSION_COLUMNS} FROM voting_sessions WHERE id = :id"),
                {"id": session_id},
            )
            row = result.mappings().first()
            return _row_to_session(row) if row else None

    async def get_open_session_for_subject(
        self, subject_id: UUID
    ) -> VotingSession | None:
        async with self._session_factory() as db:
            result = await db.execute(
                text(f"""
                    SELECT {_SESSION_COLUMNS}
                    FROM voting_sessions
                    WHERE subject_id = :subject_id
                      AND status IN ('pending', 'active', 'tallying')
                """),
                {"subject_id": subject_id},
            )
            row = result.mappings().first()
            return _row_to_session(row) if row else None

    async def update_session(self, session: VotingSession) -> None:
        async with self._session_factory() as db, db.begin():
            result = await db.execute(
                text("""
                    UPDATE voting_sessions SET
                        status = :status,
                        ends_at = :ends_at,
                        automated_panel_size = :automated_panel_size,
                        flag_reason = :flag_reason
                    WHERE id = :id
                """),
                {
                    "id": session.id,
                    "status": session.status.value,
                    "ends_at": session.ends_at,
                    "automated_panel_size": session.automated_panel_size,
                    "flag_reason": session.flag_reason,
                },
            )
            if result.rowcount == 0:
                raise VotingSessionNotFoundError(session.id)

    async def record_vote(self, vote: Vote) -> VotingSession:
        column = _counter_column(vote.voter_kind, vote.choice)
        try:
            async with self._session_factory() as db, db.begin():
                locked = await db.execute(
                    text("""
                        SELECT status, ends_at FROM voting_sessions
                        WHERE id = :id
                        FOR UPDATE
                    """),
                    {"id": vote.session_id},
                )
                row = locked.mappings().first()
                if row is None:
                    raise VotingSessionNotFoundError(vote.session_id)
                status = SessionStatus(row["status"])
                if status != SessionStatus.ACTIVE:
                    raise InvalidSessionStateError(
                        vote.session_id, status, operation="vote in"
                    )
                if vote.cast_at >= row["ends_at"]:
                    raise VotingWindowClosedError(vote.session_id, row["ends_at"])
                await db.execute(
                    text("""
                        INSERT INTO votes (
                            id, session_id, voter_kind, voter_id, choice,
                            rationale, cast_at
                        ) VALUES (
                            :id, :session_id, :voter_kind, :voter_id, :choice,
                            :rationale, :cast_at
                        )
                    """),
                    {
                        "id": vote.id,
                        "session_id": vote.session_id,
                        "voter_kind": vote.voter_kind.value,
                        "voter_id": vote.voter_id,
                        "choice": vote.choice.value,
                        "rationale": vote.rationale,
                        "cast_at": vote.cast_at,
                    },
                )
                result = await db.execute(
                    text(f"""
                        UPDATE voting_sessions
                        SET {column} = {column} + 1
                        WHERE id = :id
                        RETURNING {_SESSION_COLUMNS}
                    """),
                    {"id": vote.session_id},
                )
                return _row_to_session(result.mappings().one())
        except IntegrityError as e:
            raise DuplicateVoteError(
                vote.session_id, vote.voter_kind, vote.voter_id
            ) from e

    async def list_votes(self, session_id: UUID) -> list[Vote]:
        async with self._session_factory() as db:
            result = await db.execute(
                text("""
                    SELECT id, session_id, voter_kind, voter_id, choice,
                           rationale, cast_at
                    FROM votes
                    WHERE session_id = :session_id
                    ORDER BY cast_at ASC, id ASC
                """),
                {"session_id": session_id},
            )
            return [_row_to_vote(row) for row in result.mappings()]

    async def save_automated_voter(self, voter: AutomatedVoter) -> None:
        async with self._session_factory() as db, db.begin():
            await db.execute(
                text("""
                    INSERT INTO automated_voters (
                        id, session_id, category, perspective_name,
                        perspective_name_ko, focus, vote, reasoning, confidence,
                        evaluation_failed, created_at
                    ) VALUES (
                        :id, :session_id, :category, :perspective_name,
                        :perspective_name_ko, :focus, :vote, :reasoning,
                        :confidence, :evaluation_failed, :created_at
                    )
                """),
                {
                    "id": voter.id,
                    "session_id": voter.session_id,
                    "category": voter.category.value,
                    "perspective_name": voter.perspective.name,
                    "perspective_name_ko": voter.perspective.name_ko,
                    "focus": voter.perspective.focus,
                    "vote": voter.judgment.vote.value,
                    "reasoning": voter.judgment.reasoning,
                    "confidence": voter.judgment.confidence,
                    "evaluation_failed": voter.evaluation_failed,
                    "created_at": voter.created_at,
                },
            )

    async def list_automated_voters(self, session_id: UUID) -> list[AutomatedVoter]:
        async with self._session_factory() as db:
            result = await db.execute(
                text("""
                    SELECT id, session_id, category, perspective_name,
                           perspective_name_ko, focus, vote, reasoning,
                           confidence, evaluation_failed, created_at
                    FROM automated_voters
                    WHERE session_id = :session_id
                    ORDER BY created_at ASC, id ASC
                """),
                {"session_id": session_id},
            )
            return [_row_to_voter(row) for row in result.mappings()]

    async def list_active_sessions(self) -> list[VotingSession]:
        async with self._session_factory() as db:
            result = await db.execute(
                text(f"""
                    SELECT {_SESSION_COLUMNS}
                    FROM voting_sessions
                    WHERE status = 'active'
                    ORDER BY ends_at ASC
                """)
            )
            return [_row_to_session(row) for row in result.mappings()]
