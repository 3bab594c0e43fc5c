"""In-memory voting repository.

The session status and window check, vote uniqueness and the counter
increment happen under one asyncio.Lock, so concurrent record_vote calls
behave like the database's locked session row plus unique index.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from uuid import UUID

from src.application.ports.voting_repository import VotingRepositoryProtocol
from src.domain.errors.voting import (
    ActiveSessionExistsError,
    DuplicateVoteError,
    InvalidSessionStateError,
    VotingSessionNotFoundError,
    VotingWindowClosedError,
)
from src.domain.models.automated_voter import AutomatedVoter
from src.domain.models.vote import Vote, VoterKind
from src.domain.models.voting_session import SessionStatus, VotingSession


class VotingRepositoryStub(VotingRepositoryProtocol):
    """Dictionary-backed VotingRepositoryProtocol."""

    def __init__(self) -> None:
        self._sessions: dict[UUID, VotingSession] = {}
        self._votes: dict[UUID, list[Vote]] = {}
        self._vote_keys: set[tuple[UUID, VoterKind, str]] = set()
        self._voters: dict[UUID, list[AutomatedVoter]] = {}
        self._lock = asyncio.Lock()

    def clear(self) -> None:
        self._sessions.clear()
        self._votes.clear()
        self._vote_keys.clear()
        self._voters.clear()

    def add_session(self, session: VotingSession) -> None:
        """Seed a session directly, bypassing the open-session check."""
        self._sessions[session.id] = session

    async def create_session(self, session: VotingSession) -> None:
        async with self._lock:
            existing = self._open_session_for(session.subject_id)
            if existing is not None:
                raise ActiveSessionExistsError(session.subject_id, existing.id)
            self._sessions[session.id] = session

    async def get_session(self, session_id: UUID) -> VotingSession | None:
        return self._sessions.get(session_id)

    async def get_open_session_for_subject(
        self, subject_id: UUID
    ) -> VotingSession | None:
        return self._open_session_for(subject_id)

    async def update_session(self, session: VotingSession) -> None:
        async with self._lock:
            stored = self._sessions.get(session.id)
            if stored is None:
                raise VotingSessionNotFoundError(session.id)
            self._sessions[session.id] = replace(session, counters=stored.counters)

    async def record_vote(self, vote: Vote) -> VotingSession:
        async with self._lock:
            session = self._sessions.get(vote.session_id)
            if session is None:
                raise VotingSessionNotFoundError(vote.session_id)
            if session.status != SessionStatus.ACTIVE:
                raise InvalidSessionStateError(
                    vote.session_id, session.status, operation="vote in"
                )
            if vote.cast_at >= session.ends_at:
                raise VotingWindowClosedError(vote.session_id, session.ends_at)
            if vote.identity in self._vote_keys:
                raise DuplicateVoteError(vote.session_id, vote.voter_kind, vote.voter_id)
            self._vote_keys.add(vote.identity)
            self._votes.setdefault(vote.session_id, []).append(vote)
            session = session.with_vote(vote.voter_kind, vote.choice)
            self._sessions[session.id] = session
            return session

    async def list_votes(self, session_id: UUID) -> list[Vote]:
        return list(self._votes.get(session_id, []))

    async def save_automated_voter(self, voter: AutomatedVoter) -> None:
        self._voters.setdefault(voter.session_id, []).append(voter)

    async def list_automated_voters(self, session_id: UUID) -> list[AutomatedVoter]:
        return list(self._voters.get(session_id, []))

    async def list_active_sessions(self) -> list[VotingSession]:
        return sorted(
            (s for s in self._sessions.values() if s.status == SessionStatus.ACTIVE),
            key=lambda s: s.ends_at,
        )

    def _open_session_for(self, subject_id: UUID) -> VotingSession | None:
        for session in self._sessions.values():
            if session.subject_id == subject_id and not session.status.is_terminal():
                return session
        return None
