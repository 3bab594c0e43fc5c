"""Submission domain model.

A submission is a piece of proposed text on its way through the pipeline.
Only pipeline services mutate its status; the presentation layer reads it.

Lifecycle:
    draft -> submitted -> screening -> screening_passed -> refining -> refined
          -> voting -> approved -> registered
    Rejections land in screening_failed (rescreenable) or rejected.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from uuid import UUID

from uuid6 import uuid7


class SubmissionType(Enum):
    """Declared kind of a submission, each with its own length ceiling."""

    WISDOM = "wisdom"
    STORY = "story"
    REFLECTION = "reflection"
    TEACHING = "teaching"
    PRAYER = "prayer"
    POEM = "poem"

    @property
    def max_length(self) -> int:
        """Maximum raw text length in characters for this type."""
        return MAX_TEXT_LENGTH[self]


MAX_TEXT_LENGTH: dict[SubmissionType, int] = {
    SubmissionType.WISDOM: 500,
    SubmissionType.STORY: 5000,
    SubmissionType.REFLECTION: 2000,
    SubmissionType.TEACHING: 3000,
    SubmissionType.PRAYER: 1000,
    SubmissionType.POEM: 1500,
}

MAX_TITLE_LENGTH = 200


class SubmissionStatus(Enum):
    """Coarse lifecycle status of a submission."""

    DRAFT = "draft"
    SUBMITTED = "submitted"
    SCREENING = "screening"
    SCREENING_PASSED = "screening_passed"
    SCREENING_FAILED = "screening_failed"
    REFINING = "refining"
    REFINED = "refined"
    VOTING = "voting"
    APPROVED = "approved"
    REJECTED = "rejected"
    REGISTERED = "registered"

    def is_terminal(self) -> bool:
        """Registered is final; rejected can still be resubmitted."""
        return self == SubmissionStatus.REGISTERED


@dataclass(frozen=True, eq=True)
class Submission:
    """A community submission.

    Attributes:
        id: UUIDv7 identifier.
        owner_id: Opaque actor id of the submitter.
        submission_type: Declared type.
        title: Short title (<= 200 chars).
        raw_text: Text exactly as submitted.
        status: Lifecycle status.
        compliance_score: Overall score from the latest screening.
        rejection_reason: Why the submission was rejected, if it was.
        related_entry_id: Published entry id once registered.
        created_at: Creation time (UTC).
        updated_at: Last status change (UTC).
    """

    id: UUID
    owner_id: str
    submission_type: SubmissionType
    title: str
    raw_text: str
    status: SubmissionStatus
    created_at: datetime
    updated_at: datetime
    compliance_score: float | None = None
    rejection_reason: str | None = None
    related_entry_id: str | None = None

    @classmethod
    def create(
        cls,
        owner_id: str,
        submission_type: SubmissionType,
        title: str,
        raw_text: str,
        created_at: datetime,
        draft: bool = False,
    ) -> Submission:
        """Create a new submission in draft or submitted status.

        Args:
            owner_id: Opaque actor id of the submitter.
            submission_type: Declared type.
            title: Submission title.
            raw_text: Submitted text.
            created_at: Creation time.
            draft: Keep as a draft instead of submitting for screening.

        Returns:
            New Submission.
        """
        return cls(
            id=uuid7(),
            owner_id=owner_id,
            submission_type=submission_type,
            title=title,
            raw_text=raw_text,
            status=SubmissionStatus.DRAFT if draft else SubmissionStatus.SUBMITTED,
            created_at=created_at,
            updated_at=created_at,
        )

    def with_status(
        self,
        status: SubmissionStatus,
        updated_at: datetime,
        **changes: object,
    ) -> Submission:
        """Return a copy with a new status and optional field changes.

        Args:
            status: New status.
            updated_at: Time of the change.
            **changes: Other fields to replace (compliance_score, ...).

        Returns:
            Updated Submission.
        """
        return replace(self, status=status, updated_at=updated_at, **changes)
