"""Unit tests for ScreeningService.

Key Test Scenarios:
1. Approve / review / reject bands
2. Safety fails safe
3. Status restored when screening cannot run
4. Rescreening of failed submissions
"""

from __future__ import annotations

import pytest
from uuid6 import uuid7

from src.application.services.audit_outbox import AuditOutbox
from src.application.services.screening_service import (
    ScreeningService,
    decide_recommendation,
)
from src.domain.errors.compliance import NoActivePrinciplesError
from src.domain.errors.submission import SubmissionNotFoundError, SubmissionStateError
from src.domain.models.audit_event import AuditEventType
from src.domain.models.compliance import (
    SafetyAssessment,
    SafetyFlag,
    ScreeningRecommendation,
)
from src.domain.models.submission import SubmissionStatus
from src.infrastructure.stubs import (
    AuditSinkStub,
    JudgmentServiceStub,
    PrincipleRepositoryStub,
    SubmissionRepositoryStub,
)
from tests.helpers.factories import make_submission

PRINCIPLE_IDS = ("compassion", "non_harm", "inclusivity", "reason", "humility")


def _score_all(judgment: JudgmentServiceStub, score: float) -> None:
    for principle_id in PRINCIPLE_IDS:
        judgment.set_score(principle_id, score)


class TestDecideRecommendation:
    """Tests for the recommendation bands."""

    @pytest.mark.parametrize(
        ("score", "is_safe", "expected"),
        [
            (0.70, True, ScreeningRecommendation.APPROVE),
            (0.95, True, ScreeningRecommendation.APPROVE),
            (0.69, True, ScreeningRecommendation.REVIEW),
            (0.50, True, ScreeningRecommendation.REVIEW),
            (0.49, True, ScreeningRecommendation.REJECT),
            (0.95, False, ScreeningRecommendation.REJECT),
        ],
    )
    def test_bands(
        self, score: float, is_safe: bool, expected: ScreeningRecommendation
    ) -> None:
        """Unsafe always rejects; otherwise the score picks the band."""
        assert decide_recommendation(score, is_safe) == expected


class TestScreen:
    """Tests for ScreeningService.screen()."""

    @pytest.mark.asyncio
    async def test_compliant_submission_passes(
        self,
        screening_service: ScreeningService,
        submission_repo: SubmissionRepositoryStub,
    ) -> None:
        """A compliant, safe submission moves to screening_passed."""
        submission = make_submission()
        submission_repo.add_submission(submission)

        evaluation = await screening_service.screen(submission.id)

        stored = await submission_repo.get(submission.id)
        assert evaluation.recommendation == ScreeningRecommendation.APPROVE
        assert stored.status == SubmissionStatus.SCREENING_PASSED
        assert stored.compliance_score == pytest.approx(0.8)
        assert stored.rejection_reason is None
        assert await submission_repo.list_evaluations(submission.id) == [evaluation]

    @pytest.mark.asyncio
    async def test_review_band_fails_screening(
        self,
        screening_service: ScreeningService,
        submission_repo: SubmissionRepositoryStub,
        judgment: JudgmentServiceStub,
    ) -> None:
        """A 0.6 score lands in review and the submission fails screening."""
        _score_all(judgment, 0.6)
        submission = make_submission()
        submission_repo.add_submission(submission)

        evaluation = await screening_service.screen(submission.id)

        stored = await submission_repo.get(submission.id)
        assert evaluation.recommendation == ScreeningRecommendation.REVIEW
        assert stored.status == SubmissionStatus.SCREENING_FAILED
        assert stored.rejection_reason.startswith("Not compliant")

    @pytest.mark.asyncio
    async def test_score_rounding_to_band_edge_stays_in_review(
        self,
        screening_service: ScreeningService,
        submission_repo: SubmissionRepositoryStub,
        judgment: JudgmentServiceStub,
    ) -> None:
        """0.69996 is stored as 0.7 but is below the approve band."""
        _score_all(judgment, 0.69996)
        submission = make_submission()
        submission_repo.add_submission(submission)

        evaluation = await screening_service.screen(submission.id)

        stored = await submission_repo.get(submission.id)
        assert evaluation.recommendation == ScreeningRecommendation.REVIEW
        assert stored.status == SubmissionStatus.SCREENING_FAILED
        assert stored.compliance_score == 0.7

    @pytest.mark.asyncio
    async def test_unsafe_text_rejected_despite_high_score(
        self,
        screening_service: ScreeningService,
        submission_repo: SubmissionRepositoryStub,
        judgment: JudgmentServiceStub,
    ) -> None:
        """Safety flags reject regardless of the compliance score."""
        _score_all(judgment, 0.95)
        judgment.set_safety(
            SafetyAssessment(is_safe=False, flags=(SafetyFlag.VIOLENCE,), reasoning="x")
        )
        submission = make_submission()
        submission_repo.add_submission(submission)

        evaluation = await screening_service.screen(submission.id)

        stored = await submission_repo.get(submission.id)
        assert evaluation.recommendation == ScreeningRecommendation.REJECT
        assert evaluation.safety_flags == (SafetyFlag.VIOLENCE,)
        assert stored.status == SubmissionStatus.SCREENING_FAILED
        assert stored.rejection_reason.startswith("Safety concerns: violence.")

    @pytest.mark.asyncio
    async def test_safety_outage_counts_as_unsafe(
        self,
        screening_service: ScreeningService,
        submission_repo: SubmissionRepositoryStub,
        judgment: JudgmentServiceStub,
    ) -> None:
        """An unavailable safety check fails safe."""
        judgment.fail_safety()
        submission = make_submission()
        submission_repo.add_submission(submission)

        evaluation = await screening_service.screen(submission.id)

        stored = await submission_repo.get(submission.id)
        assert evaluation.safety.is_safe is False
        assert evaluation.recommendation == ScreeningRecommendation.REJECT
        assert stored.rejection_reason.startswith("Safety could not be confirmed.")

    @pytest.mark.asyncio
    async def test_language_outage_uses_neutral_quality(
        self,
        screening_service: ScreeningService,
        submission_repo: SubmissionRepositoryStub,
        judgment: JudgmentServiceStub,
    ) -> None:
        """Language quality falls back to neutral and does not block approval."""
        judgment.fail_language()
        submission = make_submission()
        submission_repo.add_submission(submission)

        evaluation = await screening_service.screen(submission.id)

        assert evaluation.language.fluency == 0.5
        assert evaluation.language.grammar == 0.5
        assert evaluation.recommendation == ScreeningRecommendation.APPROVE

    @pytest.mark.asyncio
    async def test_records_screened_event(
        self,
        screening_service: ScreeningService,
        submission_repo: SubmissionRepositoryStub,
        outbox: AuditOutbox,
        audit_sink: AuditSinkStub,
    ) -> None:
        """Screening writes a constitution check and a screened event."""
        submission = make_submission()
        submission_repo.add_submission(submission)

        await screening_service.screen(submission.id)
        await outbox.flush()

        types = [event.event_type for event in audit_sink.events]
        assert types == [
            AuditEventType.CONSTITUTION_CHECK,
            AuditEventType.SUBMISSION_SCREENED,
        ]
        assert audit_sink.events[1].details["recommendation"] == "approve"


class TestScreenPreconditions:
    """Tests for status checks and failure recovery."""

    @pytest.mark.asyncio
    async def test_unknown_submission(self, screening_service: ScreeningService) -> None:
        with pytest.raises(SubmissionNotFoundError):
            await screening_service.screen(uuid7())

    @pytest.mark.asyncio
    async def test_already_passed_submission_rejected(
        self,
        screening_service: ScreeningService,
        submission_repo: SubmissionRepositoryStub,
    ) -> None:
        """Only submitted texts can be screened."""
        submission = make_submission(status=SubmissionStatus.SCREENING_PASSED)
        submission_repo.add_submission(submission)

        with pytest.raises(SubmissionStateError):
            await screening_service.screen(submission.id)

    @pytest.mark.asyncio
    async def test_failed_submission_requires_rescreen_flag(
        self,
        screening_service: ScreeningService,
        submission_repo: SubmissionRepositoryStub,
    ) -> None:
        """screening_failed is screenable only with rescreen=True."""
        submission = make_submission(status=SubmissionStatus.SCREENING_FAILED)
        submission_repo.add_submission(submission)

        with pytest.raises(SubmissionStateError):
            await screening_service.screen(submission.id)

        evaluation = await screening_service.screen(submission.id, rescreen=True)

        assert evaluation.recommendation == ScreeningRecommendation.APPROVE
        stored = await submission_repo.get(submission.id)
        assert stored.status == SubmissionStatus.SCREENING_PASSED

    @pytest.mark.asyncio
    async def test_no_principles_restores_status(
        self,
        screening_service: ScreeningService,
        submission_repo: SubmissionRepositoryStub,
        principle_repo: PrincipleRepositoryStub,
    ) -> None:
        """A fatal scoring error leaves the submission where it was."""
        principle_repo.clear()
        submission = make_submission()
        submission_repo.add_submission(submission)

        with pytest.raises(NoActivePrinciplesError):
            await screening_service.screen(submission.id)

        stored = await submission_repo.get(submission.id)
        assert stored.status == SubmissionStatus.SUBMITTED
        assert await submission_repo.list_evaluations(submission.id) == []
