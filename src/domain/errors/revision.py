"""Revision proposal workflow errors."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from src.domain.exceptions import GovernanceError

if TYPE_CHECKING:
    from src.domain.models.revision_proposal import RevisionStatus


class RevisionError(GovernanceError):
    """Base class for revision-related errors."""

    pass


class RevisionNotFoundError(RevisionError):
    """Raised when a revision proposal does not exist."""

    def __init__(self, proposal_id: UUID) -> None:
        self.proposal_id = proposal_id
        super().__init__(f"Revision proposal not found: {proposal_id}")


class InvalidRevisionError(RevisionError):
    """Raised when a proposal is missing required fields."""

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid revision {field}: {reason}")


class InvalidRevisionStateError(RevisionError):
    """Raised when a workflow step runs in the wrong proposal status.

    Attributes:
        proposal_id: The proposal.
        current_status: Status at call time.
        operation: The attempted step.
    """

    def __init__(
        self, proposal_id: UUID, current_status: RevisionStatus, operation: str
    ) -> None:
        self.proposal_id = proposal_id
        self.current_status = current_status
        self.operation = operation
        super().__init__(
            f"Cannot {operation} revision {proposal_id} "
            f"in status {current_status.value}"
        )


class DiscussionWindowOpenError(RevisionError):
    """Raised when voting is requested before the discussion window ends."""

    def __init__(self, proposal_id: UUID, discussion_ends_at: datetime) -> None:
        self.proposal_id = proposal_id
        self.discussion_ends_at = discussion_ends_at
        super().__init__(
            f"Discussion for revision {proposal_id} is open until "
            f"{discussion_ends_at.isoformat()}"
        )


class RevisionNotApprovedError(RevisionError):
    """Raised when applying a proposal whose vote did not approve it."""

    def __init__(self, proposal_id: UUID, session_outcome: str) -> None:
        self.proposal_id = proposal_id
        self.session_outcome = session_outcome
        super().__init__(
            f"Revision {proposal_id} cannot be applied; "
            f"voting outcome is {session_outcome}"
        )


class RevisionCooldownActiveError(RevisionError):
    """Raised when a proposer is still cooling down on an entry.

    Attributes:
        entry_id: The target entry.
        proposer_id: The proposer.
        cooldown_until: When proposals are accepted again.
    """

    def __init__(self, entry_id: str, proposer_id: str, cooldown_until: datetime) -> None:
        self.entry_id = entry_id
        self.proposer_id = proposer_id
        self.cooldown_until = cooldown_until
        super().__init__(
            f"Proposer {proposer_id} is in cooldown for entry {entry_id} "
            f"until {cooldown_until.isoformat()}"
        )
