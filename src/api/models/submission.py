"""Submission API request/response models."""

from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from src.api.models.common import DateTimeWithZ

SubmissionTypeName = Literal["wisdom", "story", "reflection", "teaching", "prayer", "poem"]


class SubmitRequest(BaseModel):
    """Request to submit text for screening.

    Length rules depend on the submission type and are enforced by the
    intake service, so only shape is validated here.
    """

    submission_type: SubmissionTypeName
    title: str = Field(..., description="Title, at most 200 characters")
    text: str = Field(..., description="Body text")
    draft: bool = Field(default=False, description="Save without screening")


class PrincipleScoreModel(BaseModel):
    principle_id: str
    principle_name: str
    weight: float
    score: float
    rationale: str
    failed: bool


class ScreeningSummary(BaseModel):
    """Latest screening of a submission."""

    recommendation: Literal["approve", "reject", "review"]
    overall_score: float
    threshold: float
    compliant: bool
    is_safe: bool
    safety_flags: list[str]
    language_score: float
    principle_scores: list[PrincipleScoreModel]
    summary: str
    evaluated_at: DateTimeWithZ


class SubmissionResponse(BaseModel):
    """Current state of a submission.

    Attributes:
        id: Submission id (UUIDv7).
        status: Lifecycle status.
        refinement_stage: raw, draft, refined or canonical.
        compliance_score: Overall score from the latest screening.
        rejection_reason: Why it was rejected, if it was.
        related_entry_id: Published entry once registered.
        screening: Latest screening detail, if screened.
    """

    id: UUID
    owner_id: str
    submission_type: SubmissionTypeName
    title: str
    status: str
    refinement_stage: str
    compliance_score: float | None
    rejection_reason: str | None
    related_entry_id: str | None
    screening: ScreeningSummary | None
    created_at: DateTimeWithZ
    updated_at: DateTimeWithZ


class AdvanceRefinementRequest(BaseModel):
    """Advance the text one stage; skipping a stage is refused with 400."""

    target_stage: Literal["draft", "refined", "canonical"]


class RefinementResponse(BaseModel):
    """The record appended by one refinement step.

    Attributes:
        warning: Drift warning when similarity fell below the threshold.
    """

    id: UUID
    submission_id: UUID
    stage: str
    text_ko: str
    text_en: str
    similarity_to_previous: float
    change_summary: str
    similarity_warning: bool
    warning: str | None
    model: str
    created_at: DateTimeWithZ


class PlaceRequest(BaseModel):
    """Optional manual placement; both fields default to analysis."""

    chapter: int | None = Field(default=None, ge=1)
    position: int | None = Field(default=None, ge=1, description="Verse number")


class EntryResponse(BaseModel):
    id: str
    chapter: int
    verse: int
    theme: str
    text_ko: str
    text_en: str
    version: int
    origin: str
    source_submission_id: UUID | None
    traditions: list[str]
    reflection: str
    created_at: DateTimeWithZ
    updated_at: DateTimeWithZ
