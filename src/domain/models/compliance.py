"""Compliance scoring domain models.

A principle is a named, weighted rule. A compliance run scores a text
against every active principle and reduces the scores to one weighted
overall value.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from uuid import UUID

from uuid6 import uuid7


class CheckType(Enum):
    """What is being checked; selects the pass threshold."""

    SUBMISSION = "submission"
    REVISION = "revision"
    AMENDMENT = "amendment"


class ScreeningRecommendation(Enum):
    """Outcome suggested by an initial screening."""

    APPROVE = "approve"
    REJECT = "reject"
    REVIEW = "review"


class SafetyFlag(Enum):
    """Content categories the safety assessment may raise."""

    VIOLENCE = "violence"
    HATE_SPEECH = "hate_speech"
    SELF_HARM = "self_harm"
    SEXUAL_CONTENT = "sexual_content"
    DANGEROUS_ACTIVITIES = "dangerous_activities"


@dataclass(frozen=True, eq=True)
class Principle:
    """A weighted compliance rule.

    Attributes:
        id: Principle identifier.
        name: Short display name.
        description: What the principle asks of a text.
        weight: Relative weight in the overall score (>= 0).
        priority: Evaluation order; lower comes first.
        is_active: Inactive principles are not evaluated.
    """

    id: str
    name: str
    description: str
    weight: float
    priority: int = 0
    is_active: bool = True

    def __post_init__(self) -> None:
        if self.weight < 0:
            raise ValueError(f"weight must be non-negative, got {self.weight}")


@dataclass(frozen=True, eq=True)
class PrincipleJudgment:
    """Raw judgment returned by the judgment service for one principle."""

    score: float
    reasoning: str


@dataclass(frozen=True, eq=True)
class PrincipleScore:
    """One principle's contribution to a compliance run.

    Attributes:
        principle_id: The principle.
        principle_name: Its display name.
        weight: Its weight at evaluation time.
        score: Score in [0, 1].
        rationale: Evaluator reasoning, or the error that replaced it.
        failed: True when the neutral fallback score was used.
    """

    principle_id: str
    principle_name: str
    weight: float
    score: float
    rationale: str
    failed: bool = False


@dataclass(frozen=True, eq=True)
class ComplianceResult:
    """Result of scoring one text against the active principle set.

    Attributes:
        check_type: What was checked.
        overall_score: Weighted mean of principle scores, rounded to 4
            decimals for reporting.
        threshold: Pass threshold for the check type.
        compliant: Unrounded weighted mean >= threshold.
        principle_scores: Per-principle detail, in priority order.
        recommendation: Human-readable summary naming weak principles.
    """

    check_type: CheckType
    overall_score: float
    threshold: float
    compliant: bool
    principle_scores: tuple[PrincipleScore, ...]
    recommendation: str

    @property
    def failed_evaluations(self) -> int:
        """Number of principles that fell back to the neutral score."""
        return sum(1 for s in self.principle_scores if s.failed)


@dataclass(frozen=True, eq=True)
class SafetyAssessment:
    """Result of the safety assessment.

    Attributes:
        is_safe: False when any flag was raised or the check failed.
        flags: Raised flags.
        reasoning: Evaluator reasoning.
    """

    is_safe: bool
    flags: tuple[SafetyFlag, ...] = ()
    reasoning: str = ""


@dataclass(frozen=True, eq=True)
class LanguageQuality:
    """Fluency and grammar scores, each in [0, 1]."""

    fluency: float
    grammar: float
    notes: str = ""

    @property
    def score(self) -> float:
        """Mean of fluency and grammar."""
        return (self.fluency + self.grammar) / 2


@dataclass(frozen=True, eq=True)
class PlagiarismResult:
    """Plagiarism check result.

    No plagiarism detector is wired in; the placeholder always reports
    original content with zero similarity.
    """

    is_original: bool = True
    max_similarity: float = 0.0
    checked: bool = False


@dataclass(frozen=True, eq=True)
class ComplianceEvaluation:
    """Immutable record of one screening attempt.

    Attributes:
        id: UUIDv7 identifier.
        subject_id: The screened submission.
        compliance: The principle scoring result.
        safety: Safety assessment.
        language: Language quality assessment.
        plagiarism: Plagiarism placeholder result.
        recommendation: approve / reject / review.
        created_at: When the screening completed.
    """

    id: UUID
    subject_id: UUID
    compliance: ComplianceResult
    safety: SafetyAssessment
    language: LanguageQuality
    recommendation: ScreeningRecommendation
    created_at: datetime
    plagiarism: PlagiarismResult = field(default_factory=PlagiarismResult)

    @classmethod
    def create(
        cls,
        subject_id: UUID,
        compliance: ComplianceResult,
        safety: SafetyAssessment,
        language: LanguageQuality,
        plagiarism: PlagiarismResult,
        recommendation: ScreeningRecommendation,
        created_at: datetime,
    ) -> ComplianceEvaluation:
        """Create a new evaluation record with a fresh id."""
        return cls(
            id=uuid7(),
            subject_id=subject_id,
            compliance=compliance,
            safety=safety,
            language=language,
            plagiarism=plagiarism,
            recommendation=recommendation,
            created_at=created_at,
        )

    @property
    def safety_flags(self) -> tuple[SafetyFlag, ...]:
        """Flags raised by the safety assessment."""
        return self.safety.flags
