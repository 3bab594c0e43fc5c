"""Voting API request/response models."""

from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from src.api.models.common import DateTimeWithZ


class CastVoteRequest(BaseModel):
    """A human vote. The choice is validated by the consensus engine."""

    choice: str = Field(..., description="for, against or abstain")
    rationale: str | None = Field(default=None, max_length=2000)


class VoteResponse(BaseModel):
    vote_id: UUID
    session_id: UUID
    voter_id: str
    choice: str
    cast_at: DateTimeWithZ


class VoteCountsModel(BaseModel):
    human_for: int
    human_against: int
    human_abstain: int
    automated_for: int
    automated_against: int
    automated_abstain: int


class VotingSessionResponse(BaseModel):
    """A voting session with its live counters.

    Attributes:
        approval_rate: for / (for + against); abstains excluded.
        quorum_met: Whether enough eligible humans have voted so far.
    """

    id: UUID
    subject_id: UUID
    subject_type: str
    title: str
    status: str
    approval_threshold: float
    quorum_fraction: float
    eligible_human_count: int
    counts: VoteCountsModel
    approval_rate: float
    quorum_met: bool
    automated_panel_size: int
    starts_at: DateTimeWithZ
    ends_at: DateTimeWithZ
    flag_reason: str | None = None


class VotingSessionListResponse(BaseModel):
    sessions: list[VotingSessionResponse]
    total: int


class CreateSessionRequest(BaseModel):
    """Open a session on a subject.

    new_submission sessions take the submission title when none is given.
    """

    subject_id: UUID
    subject_type: Literal["new_submission", "revision", "amendment", "archive_restore"]
    title: str | None = Field(default=None, max_length=200)


class PanelVoterModel(BaseModel):
    voter_id: UUID
    perspective: str
    category: str
    choice: str
    reasoning: str
    confidence: float
    evaluation_failed: bool


class PanelResponse(BaseModel):
    session_id: UUID
    panel_size: int
    voters: list[PanelVoterModel]


class TallyResponse(BaseModel):
    """Outcome of a tally. Repeating the call returns the same outcome."""

    session_id: UUID
    outcome: str
    approval_rate: float
    approval_threshold: float
    quorum_met: bool
    counts: VoteCountsModel


class FlagSessionRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=2000)
