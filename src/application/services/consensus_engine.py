"""Voting and consensus engine.

Owns the lifecycle of voting sessions: creation with a threshold fixed by
subject type, human vote casting, automated panel votes, tallying against
quorum and threshold, closing and flagging.

Tallying is idempotent: tallying a session that already has an outcome
returns the stored outcome and writes nothing. Votes are refused by the
repository once a session leaves active, so counters freeze at tally
time. Tally, close and flag are serialized per session.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import replace
from uuid import UUID

from src.application.ports.contributor_directory import ContributorDirectoryProtocol
from src.application.ports.submission_repository import SubmissionRepositoryProtocol
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.ports.voting_repository import VotingRepositoryProtocol
from src.application.services.audit_outbox import AuditOutbox
from src.application.services.automated_panel import AutomatedPanel
from src.application.services.base import LoggingMixin
from src.config.governance_config import DEFAULT_VOTING_CONFIG, VotingConfig
from src.domain.errors.submission import SubmissionNotFoundError, SubmissionStateError
from src.domain.errors.voting import (
    ActiveSessionExistsError,
    InvalidSessionStateError,
    VotingSessionNotFoundError,
    VotingWindowClosedError,
)
from src.domain.models.audit_event import ActorKind, AuditEventType
from src.domain.models.automated_voter import AutomatedVoter
from src.domain.models.submission import SubmissionStatus
from src.domain.models.vote import Vote, VoteChoice, VoterKind
from src.domain.models.voting_session import (
    SessionStatus,
    SubjectType,
    TallyResult,
    VotingSession,
)

# Submission statuses from which a new_submission vote may be opened
VOTABLE_SUBMISSION_STATUSES: tuple[SubmissionStatus, ...] = (
    SubmissionStatus.SCREENING_PASSED,
    SubmissionStatus.REFINING,
    SubmissionStatus.REFINED,
)


class ConsensusEngine(LoggingMixin):
    """Voting sessions, vote casting and tallying."""

    def __init__(
        self,
        voting: VotingRepositoryProtocol,
        submissions: SubmissionRepositoryProtocol,
        contributors: ContributorDirectoryProtocol,
        panel: AutomatedPanel,
        audit: AuditOutbox,
        time_authority: TimeAuthorityProtocol,
        config: VotingConfig = DEFAULT_VOTING_CONFIG,
    ) -> None:
        self._voting = voting
        self._submissions = submissions
        self._contributors = contributors
        self._panel = panel
        self._audit = audit
        self._time = time_authority
        self._config = config
        self._session_locks: dict[UUID, asyncio.Lock] = {}
        self._lock_users: dict[UUID, int] = {}
        self._init_logger(component="voting")

    async def create_session(
        self,
        subject_id: UUID,
        subject_type: SubjectType,
        title: str | None = None,
    ) -> VotingSession:
        """Open an active session for a subject.

        For new submissions the submission moves to voting and its title
        is used when none is given.

        Raises:
            ActiveSessionExistsError: The subject already has an open session.
            SubmissionNotFoundError: new_submission subject does not exist.
            SubmissionStateError: Submission is not ready for a vote.
        """
        log = self._log_operation(
            "create_session",
            subject_id=str(subject_id),
            subject_type=subject_type.value,
        )

        existing = await self._voting.get_open_session_for_subject(subject_id)
        if existing is not None:
            raise ActiveSessionExistsError(subject_id, existing.id)

        submission = None
        if subject_type == SubjectType.NEW_SUBMISSION:
            submission = await self._submissions.get(subject_id)
            if submission is None:
                raise SubmissionNotFoundError(subject_id)
            if submission.status not in VOTABLE_SUBMISSION_STATUSES:
                raise SubmissionStateError(
                    subject_id,
                    submission.status,
                    VOTABLE_SUBMISSION_STATUSES,
                    operation="open a vote on",
                )
            title = title or submission.title

        eligible = await self._contributors.count_eligible_voters()
        now = self._time.now()
        session = VotingSession.create(
            subject_id=subject_id,
            subject_type=subject_type,
            title=title or "",
            approval_threshold=self._config.threshold_for(subject_type.value),
            quorum_fraction=self._config.quorum_fraction,
            eligible_human_count=eligible,
            starts_at=now,
            ends_at=now + self._config.window,
        )
        await self._voting.create_session(session)

        if submission is not None:
            await self._submissions.update(
                submission.with_status(SubmissionStatus.VOTING, now)
            )

        self._audit.record(
            AuditEventType.VOTING_CREATED,
            ActorKind.SYSTEM,
            subject_type="voting_session",
            subject_id=session.id,
            details={
                "subject_id": str(subject_id),
                "subject_type": subject_type.value,
                "approval_threshold": session.approval_threshold,
                "eligible_human_count": eligible,
                "ends_at": session.ends_at.isoformat(),
            },
        )
        log.info(
            "voting_session_created",
            session_id=str(session.id),
            approval_threshold=session.approval_threshold,
            eligible_human_count=eligible,
        )
        return session

    async def get_session(self, session_id: UUID) -> VotingSession:
        """Fetch a session.

        Raises:
            VotingSessionNotFoundError: Unknown session.
        """
        session = await self._voting.get_session(session_id)
        if session is None:
            raise VotingSessionNotFoundError(session_id)
        return session

    async def generate_automated_voters(
        self, session_id: UUID, subject_text: str
    ) -> list[AutomatedVoter]:
        """Convene the automated panel and record each member's vote.

        Raises:
            VotingSessionNotFoundError: Unknown session.
            InvalidSessionStateError: Session is not active or already
                has a panel.
        """
        log = self._log_operation("generate_automated_voters", session_id=str(session_id))
        async with self._session_lock(session_id):
            session = await self.get_session(session_id)
            if session.status != SessionStatus.ACTIVE:
                raise InvalidSessionStateError(
                    session_id, session.status, operation="convene a panel for"
                )
            if session.automated_panel_size > 0:
                raise InvalidSessionStateError(
                    session_id, session.status, operation="convene a second panel for"
                )

            voters = await self._panel.convene(session, session.title, subject_text)
            for voter in voters:
                await self._voting.save_automated_voter(voter)
                session = await self._voting.record_vote(
                    Vote.create(
                        session_id=session_id,
                        voter_kind=VoterKind.AUTOMATED,
                        voter_id=str(voter.id),
                        choice=voter.judgment.vote,
                        cast_at=voter.created_at,
                        rationale=voter.judgment.reasoning,
                    )
                )

            await self._voting.update_session(
                replace(session, automated_panel_size=len(voters))
            )

        distribution = {choice.value: 0 for choice in VoteChoice}
        for voter in voters:
            distribution[voter.judgment.vote.value] += 1
        self._audit.record(
            AuditEventType.VOTE_CAST,
            ActorKind.AI,
            subject_type="voting_session",
            subject_id=session_id,
            details={
                "panel_size": len(voters),
                "votes": distribution,
                "failed_evaluations": sum(1 for v in voters if v.evaluation_failed),
            },
        )
        log.info("automated_votes_recorded", panel_size=len(voters), **distribution)
        return voters

    async def cast_vote(
        self,
        session_id: UUID,
        voter_id: str,
        choice: VoteChoice | str,
        voter_kind: VoterKind = VoterKind.HUMAN,
        rationale: str | None = None,
    ) -> Vote:
        """Record one vote.

        Raises:
            InvalidVoteChoiceError: Unknown choice string.
            VotingSessionNotFoundError: Unknown session.
            InvalidSessionStateError: Session is not active.
            VotingWindowClosedError: now is at or after ends_at.
            DuplicateVoteError: This voter already voted in the session.
        """
        if isinstance(choice, str):
            choice = VoteChoice.parse(choice)
        log = self._log_operation(
            "cast_vote",
            session_id=str(session_id),
            voter_kind=voter_kind.value,
        )

        session = await self.get_session(session_id)
        if session.status != SessionStatus.ACTIVE:
            raise InvalidSessionStateError(session_id, session.status, operation="vote in")
        now = self._time.now()
        if now >= session.ends_at:
            raise VotingWindowClosedError(session_id, session.ends_at)

        vote = Vote.create(
            session_id=session_id,
            voter_kind=voter_kind,
            voter_id=voter_id,
            choice=choice,
            cast_at=now,
            rationale=rationale,
        )
        await self._voting.record_vote(vote)

        self._audit.record(
            AuditEventType.VOTE_CAST,
            ActorKind.HUMAN if voter_kind == VoterKind.HUMAN else ActorKind.AI,
            subject_type="voting_session",
            subject_id=session_id,
            actor_id=voter_id,
            details={"choice": choice.value},
        )
        log.info("vote_cast", choice=choice.value)
        return vote

    async def tally(self, session_id: UUID) -> TallyResult:
        """Tally a session and move it to its outcome status.

        Raises:
            VotingSessionNotFoundError: Unknown session.
            InvalidSessionStateError: Session is pending or flagged.
        """
        async with self._session_lock(session_id):
            return await self._tally(session_id)

    async def close(self, session_id: UUID) -> VotingSession:
        """Tally if needed and end the window now."""
        async with self._session_lock(session_id):
            session = await self.get_session(session_id)
            if not session.status.is_terminal():
                await self._tally(session_id)
                session = await self.get_session(session_id)
            now = self._time.now()
            if now < session.ends_at:
                session = replace(session, ends_at=now)
                await self._voting.update_session(session)
            self._log_operation("close", session_id=str(session_id)).info(
                "voting_session_closed", status=session.status.value
            )
            return session

    async def flag(self, session_id: UUID, reason: str) -> VotingSession:
        """Move a non-terminal session to flagged.

        Raises:
            InvalidSessionStateError: Session already has an outcome.
        """
        async with self._session_lock(session_id):
            session = await self.get_session(session_id)
            if session.status.is_terminal():
                raise InvalidSessionStateError(session_id, session.status, operation="flag")
            session = session.with_status(SessionStatus.FLAGGED, flag_reason=reason)
            await self._voting.update_session(session)
            self._audit.record(
                AuditEventType.VOTE_CAST,
                ActorKind.SYSTEM,
                subject_type="voting_session",
                subject_id=session_id,
                details={"action": "flag", "reason": reason},
            )
            self._log_operation("flag", session_id=str(session_id)).warning(
                "voting_session_flagged", reason=reason
            )
            return session

    async def list_active_sessions(self) -> list[VotingSession]:
        """Active sessions, soonest-ending first."""
        sessions = await self._voting.list_active_sessions()
        return sorted(sessions, key=lambda s: s.ends_at)

    @asynccontextmanager
    async def _session_lock(self, session_id: UUID) -> AsyncIterator[None]:
        """Serialize work on one session; the lock is dropped once unused."""
        lock = self._session_locks.setdefault(session_id, asyncio.Lock())
        self._lock_users[session_id] = self._lock_users.get(session_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            remaining = self._lock_users[session_id] - 1
            if remaining:
                self._lock_users[session_id] = remaining
            else:
                del self._lock_users[session_id]
                del self._session_locks[session_id]

    async def _tally(self, session_id: UUID) -> TallyResult:
        log = self._log_operation("tally", session_id=str(session_id))
        session = await self.get_session(session_id)

        if session.status.is_terminal():
            if session.status == SessionStatus.FLAGGED:
                raise InvalidSessionStateError(session_id, session.status, operation="tally")
            result = replace(session.compute_tally(), outcome=session.status)
            log.info("tally_recomputed", outcome=result.outcome.value)
            return result
        if session.status == SessionStatus.PENDING:
            raise InvalidSessionStateError(session_id, session.status, operation="tally")

        if session.status == SessionStatus.ACTIVE:
            await self._voting.update_session(
                session.with_status(SessionStatus.TALLYING)
            )
            # counters as of the moment votes stopped being accepted
            session = await self.get_session(session_id)

        result = session.compute_tally()
        session = session.with_status(result.outcome)
        await self._voting.update_session(session)

        if session.subject_type == SubjectType.NEW_SUBMISSION:
            await self._propagate_to_submission(session, result)

        self._audit.record(
            AuditEventType.VOTE_CAST,
            ActorKind.SYSTEM,
            subject_type="voting_session",
            subject_id=session_id,
            details={
                "action": "tally",
                "outcome": result.outcome.value,
                "approval_rate": result.approval_rate,
                "quorum_met": result.quorum_met,
                "total_for": result.counters.total_for,
                "total_against": result.counters.total_against,
            },
        )
        log.info(
            "voting_session_tallied",
            outcome=result.outcome.value,
            approval_rate=result.approval_rate,
            quorum_met=result.quorum_met,
        )
        return result

    async def _propagate_to_submission(
        self, session: VotingSession, result: TallyResult
    ) -> None:
        submission = await self._submissions.get(session.subject_id)
        if submission is None or submission.status != SubmissionStatus.VOTING:
            return
        now = self._time.now()
        if result.outcome == SessionStatus.APPROVED:
            updated = submission.with_status(SubmissionStatus.APPROVED, now)
        else:
            updated = submission.with_status(
                SubmissionStatus.REJECTED,
                now,
                rejection_reason=(
                    f"Voting outcome {result.outcome.value} "
                    f"(approval rate {result.approval_rate:.2f})"
                ),
            )
        await self._submissions.update(updated)
