"""Vote domain model.

A vote is unique per (session, voter kind, voter id). A second vote from
the same identity in the same session is rejected, not overwritten.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

from uuid6 import uuid7


class VoterKind(Enum):
    """Channel a vote arrives through."""

    HUMAN = "human"
    AUTOMATED = "automated"


class VoteChoice(Enum):
    """A voter's choice. Abstentions do not count toward approval."""

    FOR = "for"
    AGAINST = "against"
    ABSTAIN = "abstain"

    @classmethod
    def parse(cls, value: str) -> VoteChoice:
        """Parse a choice case-insensitively.

        Raises:
            InvalidVoteChoiceError: If value is not a known choice.
        """
        from src.domain.errors.voting import InvalidVoteChoiceError

        try:
            return cls(value.strip().lower())
        except (ValueError, AttributeError):
            raise InvalidVoteChoiceError(str(value)) from None


@dataclass(frozen=True, eq=True)
class Vote:
    """A single cast vote.

    Attributes:
        id: UUIDv7 identifier.
        session_id: The voting session.
        voter_kind: human or automated.
        voter_id: Opaque voter identity (actor id or automated voter id).
        choice: for / against / abstain.
        rationale: Optional reasoning.
        cast_at: When the vote was recorded.
    """

    id: UUID
    session_id: UUID
    voter_kind: VoterKind
    voter_id: str
    choice: VoteChoice
    cast_at: datetime
    rationale: str | None = None

    @classmethod
    def create(
        cls,
        session_id: UUID,
        voter_kind: VoterKind,
        voter_id: str,
        choice: VoteChoice,
        cast_at: datetime,
        rationale: str | None = None,
    ) -> Vote:
        """Create a new vote with a fresh id."""
        return cls(
            id=uuid7(),
            session_id=session_id,
            voter_kind=voter_kind,
            voter_id=voter_id,
            choice=choice,
            cast_at=cast_at,
            rationale=rationale,
        )

    @property
    def identity(self) -> tuple[UUID, VoterKind, str]:
        """Uniqueness key of this vote."""
        return (self.session_id, self.voter_kind, self.voter_id)
