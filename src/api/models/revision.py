"""Revision proposal API request/response models."""

from uuid import UUID

from pydantic import BaseModel, Field

from src.api.models.common import DateTimeWithZ


class ProposeRevisionRequest(BaseModel):
    """Request to revise a published entry."""

    entry_id: str = Field(..., pattern=r"^\d+:\d+$", description='"{chapter}:{verse}"')
    proposed_text: str
    rationale: str


class RevisionResponse(BaseModel):
    """A revision proposal.

    Attributes:
        status: Workflow status; proposed, discussion or rejected right
            after intake.
        discussion_ends_at: When voting may start.
        cooldown_until: Set when the proposal was rejected.
    """

    id: UUID
    entry_id: str
    proposer_id: str
    status: str
    compliance_score: float | None
    discussion_ends_at: DateTimeWithZ | None
    voting_session_id: UUID | None = None
    rejection_reason: str | None
    rejection_count: int
    cooldown_until: DateTimeWithZ | None
    created_at: DateTimeWithZ


class CommentRequest(BaseModel):
    content: str = Field(..., max_length=5000)


class DiscussionEntryResponse(BaseModel):
    id: UUID
    proposal_id: UUID
    author_kind: str
    author_id: str | None
    content: str
    is_ai_analysis: bool
    created_at: DateTimeWithZ


class SynthesisResponse(BaseModel):
    """Synthesis of a proposal and its discussion.

    Attributes:
        parse_failed: The evaluator output was malformed; reasoning holds
            the raw text.
    """

    proposal_id: UUID
    necessity: str
    meaning_diff: str
    impact: str
    community_summary: str
    recommendation: str
    reasoning: str
    parse_failed: bool


class RevisionVoteResponse(BaseModel):
    proposal_id: UUID
    session_id: UUID
    approval_threshold: float
    ends_at: DateTimeWithZ


class RejectRevisionRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=2000)
