"""Voting repository port.

Stores sessions, votes and automated voters. Vote insertion and the
matching counter increment happen in one atomic step, and the
(session, voter kind, voter id) triple is unique.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from src.domain.models.automated_voter import AutomatedVoter
from src.domain.models.vote import Vote
from src.domain.models.voting_session import VotingSession


class VotingRepositoryProtocol(Protocol):
    """Protocol for voting storage operations."""

    async def create_session(self, session: VotingSession) -> None:
        """Insert a session.

        Raises:
            ActiveSessionExistsError: If the subject already has a
                non-terminal session.
        """
        ...

    async def get_session(self, session_id: UUID) -> VotingSession | None:
        ...

    async def get_open_session_for_subject(
        self, subject_id: UUID
    ) -> VotingSession | None:
        """Return the subject's non-terminal session, if any."""
        ...

    async def update_session(self, session: VotingSession) -> None:
        """Persist status, ends_at, panel size or flag changes.

        Counters are owned by record_vote and are not overwritten here.
        """
        ...

    async def record_vote(self, vote: Vote) -> VotingSession:
        """Insert a vote and increment the matching counter atomically.

        The session status and window are checked in the same atomic step.

        Returns:
            The session with updated counters.

        Raises:
            DuplicateVoteError: If the identity already voted in the session.
            InvalidSessionStateError: If the session is no longer active.
            VotingWindowClosedError: If cast_at is at or after ends_at.
            VotingSessionNotFoundError: If the session does not exist.
        """
        ...

    async def list_votes(self, session_id: UUID) -> list[Vote]:
        ...

    async def save_automated_voter(self, voter: AutomatedVoter) -> None:
        ...

    async def list_automated_voters(self, session_id: UUID) -> list[AutomatedVoter]:
        ...

    async def list_active_sessions(self) -> list[VotingSession]:
        """Return active sessions ordered by ends_at ascending."""
        ...
