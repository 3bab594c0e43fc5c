"""Revision proposal domain models.

A revision proposal edits an already-published entry. It is screened,
discussed for a fixed window, voted on, and then applied or rejected.
Rejections feed a per (entry, proposer) cooldown.

Status flow:
    proposed -> screening -> discussion -> voting -> approved
    screening -> proposed          (screening service failure)
    screening | discussion | voting -> rejected
    proposed | discussion -> withdrawn
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from uuid import UUID

from uuid6 import uuid7


class RevisionStatus(Enum):
    """Status of a revision proposal."""

    PROPOSED = "proposed"
    SCREENING = "screening"
    DISCUSSION = "discussion"
    REFINING = "refining"
    VOTING = "voting"
    APPROVED = "approved"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"

    def is_terminal(self) -> bool:
        return self in (
            RevisionStatus.APPROVED,
            RevisionStatus.REJECTED,
            RevisionStatus.WITHDRAWN,
        )


class SynthesisRecommendation(Enum):
    """Recommendation of the synthesis pass."""

    APPROVE = "approve"
    REJECT = "reject"
    CONDITIONAL = "conditional"


class DiscussionAuthorKind(Enum):
    HUMAN = "human"
    AI_COUNCIL = "ai_council"


@dataclass(frozen=True, eq=True)
class RevisionProposal:
    """A proposed edit to a published entry.

    Attributes:
        id: UUIDv7 identifier.
        entry_id: Target entry ("{chapter}:{verse}").
        proposer_id: Opaque actor id of the proposer.
        original_text: Snapshot of the entry text at proposal time.
        proposed_text: Replacement text.
        rationale: Why the change is needed.
        status: Workflow status.
        created_at: When the proposal was made.
        updated_at: Last status change.
        compliance_score: Score from revision screening.
        discussion_ends_at: End of the discussion window.
        voting_session_id: Session created by start_vote.
        rejection_count: Rejections for this (entry, proposer) pair
            including this proposal's, if rejected.
        cooldown_until: Proposals from this proposer on this entry are
            refused until then.
        rejection_reason: Why it was rejected, if it was.
    """

    id: UUID
    entry_id: str
    proposer_id: str
    original_text: str
    proposed_text: str
    rationale: str
    status: RevisionStatus
    created_at: datetime
    updated_at: datetime
    compliance_score: float | None = None
    discussion_ends_at: datetime | None = None
    voting_session_id: UUID | None = None
    rejection_count: int = 0
    cooldown_until: datetime | None = None
    rejection_reason: str | None = None

    @classmethod
    def create(
        cls,
        entry_id: str,
        proposer_id: str,
        original_text: str,
        proposed_text: str,
        rationale: str,
        created_at: datetime,
    ) -> RevisionProposal:
        return cls(
            id=uuid7(),
            entry_id=entry_id,
            proposer_id=proposer_id,
            original_text=original_text,
            proposed_text=proposed_text,
            rationale=rationale,
            status=RevisionStatus.PROPOSED,
            created_at=created_at,
            updated_at=created_at,
        )

    def with_status(
        self, status: RevisionStatus, updated_at: datetime, **changes: object
    ) -> RevisionProposal:
        return replace(self, status=status, updated_at=updated_at, **changes)

    def discussion_open_at(self, now: datetime) -> bool:
        """True while the discussion window has not elapsed."""
        return self.discussion_ends_at is not None and now < self.discussion_ends_at


@dataclass(frozen=True, eq=True)
class CooldownRecord:
    """Per (entry, proposer) rejection history and cooldown expiry."""

    entry_id: str
    proposer_id: str
    rejection_count: int
    cooldown_until: datetime

    def is_active_at(self, now: datetime) -> bool:
        return now < self.cooldown_until


@dataclass(frozen=True, eq=True)
class CouncilMember:
    """An automated council member that writes discussion analyses.

    Attributes:
        id: Member identifier.
        name: Display name.
        perspective: Instructions describing the member's viewpoint.
        is_active: Inactive members are skipped.
    """

    id: str
    name: str
    perspective: str
    is_active: bool = True


@dataclass(frozen=True, eq=True)
class DiscussionEntry:
    """A comment or analysis attached to a revision proposal."""

    id: UUID
    proposal_id: UUID
    author_kind: DiscussionAuthorKind
    author_id: str | None
    content: str
    is_ai_analysis: bool
    created_at: datetime

    @classmethod
    def create(
        cls,
        proposal_id: UUID,
        author_kind: DiscussionAuthorKind,
        author_id: str | None,
        content: str,
        created_at: datetime,
        is_ai_analysis: bool = False,
    ) -> DiscussionEntry:
        return cls(
            id=uuid7(),
            proposal_id=proposal_id,
            author_kind=author_kind,
            author_id=author_id,
            content=content,
            is_ai_analysis=is_ai_analysis,
            created_at=created_at,
        )


@dataclass(frozen=True, eq=True)
class RevisionSynthesis:
    """Synthesis of a proposal and its discussion.

    Attributes:
        necessity: Whether the change is needed.
        meaning_diff: How the meaning changes.
        impact: Likely effect on readers and related entries.
        community_summary: Summary of discussion feedback.
        recommendation: approve / reject / conditional.
        reasoning: Supporting reasoning.
        parse_failed: True when the evaluator output did not match the
            schema and the raw text was kept as reasoning.
    """

    necessity: str
    meaning_diff: str
    impact: str
    community_summary: str
    recommendation: SynthesisRecommendation
    reasoning: str
    parse_failed: bool = False

    @classmethod
    def unparseable(cls, raw_text: str) -> RevisionSynthesis:
        """Fallback synthesis when the evaluator output is malformed."""
        return cls(
            necessity="Parse error",
            meaning_diff="Parse error",
            impact="Parse error",
            community_summary="Parse error",
            recommendation=SynthesisRecommendation.CONDITIONAL,
            reasoning=raw_text,
            parse_failed=True,
        )

    def format(self) -> str:
        """Render the synthesis as a discussion entry body."""
        return (
            "[Synthesis analysis]\n\n"
            f"Necessity: {self.necessity}\n\n"
            f"Meaning difference: {self.meaning_diff}\n\n"
            f"Potential impact: {self.impact}\n\n"
            f"Community feedback: {self.community_summary}\n\n"
            f"Recommendation: {self.recommendation.value}\n\n"
            f"Reasoning: {self.reasoning}"
        )
