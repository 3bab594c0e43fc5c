"""Voting and consensus errors.

Constraint violations here (duplicate vote, closed window) are surfaced
with distinct types so callers can present an accurate message.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from src.domain.exceptions import GovernanceError

if TYPE_CHECKING:
    from src.domain.models.vote import VoterKind
    from src.domain.models.voting_session import SessionStatus


class VotingError(GovernanceError):
    """Base class for voting-related errors."""

    pass


class VotingSessionNotFoundError(VotingError):
    """Raised when a voting session does not exist."""

    def __init__(self, session_id: UUID) -> None:
        self.session_id = session_id
        super().__init__(f"Voting session not found: {session_id}")


class InvalidSessionStateError(VotingError):
    """Raised when an operation is not valid in the session's status.

    Attributes:
        session_id: The session.
        current_status: Status at call time.
        operation: The attempted operation.
    """

    def __init__(
        self, session_id: UUID, current_status: SessionStatus, operation: str
    ) -> None:
        self.session_id = session_id
        self.current_status = current_status
        self.operation = operation
        super().__init__(
            f"Cannot {operation} voting session {session_id} "
            f"in status {current_status.value}"
        )


class InvalidSessionTransitionError(VotingError):
    """Raised when a session status change is not in the transition matrix."""

    def __init__(
        self, from_status: SessionStatus, to_status: SessionStatus
    ) -> None:
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Invalid voting session transition from {from_status.value} "
            f"to {to_status.value}"
        )


class ActiveSessionExistsError(VotingError):
    """Raised when a subject already has a non-terminal session.

    Attributes:
        subject_id: The subject under vote.
        existing_session_id: The open session.
    """

    def __init__(self, subject_id: UUID, existing_session_id: UUID) -> None:
        self.subject_id = subject_id
        self.existing_session_id = existing_session_id
        super().__init__(
            f"Subject {subject_id} already has an open voting session "
            f"{existing_session_id}"
        )


class InvalidVoteChoiceError(VotingError):
    """Raised when a vote choice is not one of for/against/abstain."""

    def __init__(self, choice: str) -> None:
        self.choice = choice
        super().__init__(
            f"Invalid vote choice {choice!r}; expected for, against or abstain"
        )


class DuplicateVoteError(VotingError):
    """Raised when an identity votes twice in one session.

    The original vote is kept; the second is rejected, never overwritten.

    Attributes:
        session_id: The session.
        voter_kind: human or automated.
        voter_id: The voting identity.
    """

    def __init__(self, session_id: UUID, voter_kind: VoterKind, voter_id: str) -> None:
        self.session_id = session_id
        self.voter_kind = voter_kind
        self.voter_id = voter_id
        super().__init__(
            f"Already voted: {voter_kind.value} voter {voter_id} "
            f"in session {session_id}"
        )


class VotingWindowClosedError(VotingError):
    """Raised when a vote arrives at or after the session's end time.

    Attributes:
        session_id: The session.
        ends_at: When the window closed.
    """

    def __init__(self, session_id: UUID, ends_at: datetime) -> None:
        self.session_id = session_id
        self.ends_at = ends_at
        super().__init__(
            f"Voting session {session_id} closed at {ends_at.isoformat()}"
        )
