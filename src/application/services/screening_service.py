"""Initial screening of submissions.

Runs the compliance check, the safety assessment, the language quality
assessment and the plagiarism placeholder concurrently, then combines
them into an approve / review / reject recommendation.

Status flow:
    submitted (or screening_failed, when rescreening) -> screening
    screening -> screening_passed   (approve)
    screening -> screening_failed   (review or reject)

Safety fails safe: an assessment that cannot be obtained counts as unsafe.
A fatal error (e.g. no active principles) restores the prior status.
"""

from __future__ import annotations

import asyncio
from uuid import UUID

from src.application.ports.judgment_service import JudgmentServiceProtocol
from src.application.ports.submission_repository import SubmissionRepositoryProtocol
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.services.audit_outbox import AuditOutbox
from src.application.services.base import LoggingMixin
from src.application.services.compliance_scorer import (
    DEFAULT_CALL_TIMEOUT_SECONDS,
    ComplianceScorer,
    weighted_score,
)
from src.config.governance_config import DEFAULT_COMPLIANCE_CONFIG, ComplianceConfig
from src.domain.errors.submission import SubmissionNotFoundError, SubmissionStateError
from src.domain.models.audit_event import ActorKind, AuditEventType
from src.domain.models.compliance import (
    CheckType,
    ComplianceEvaluation,
    ComplianceResult,
    LanguageQuality,
    PlagiarismResult,
    SafetyAssessment,
    ScreeningRecommendation,
)
from src.domain.models.submission import SubmissionStatus


def decide_recommendation(
    overall_score: float,
    is_safe: bool,
    config: ComplianceConfig = DEFAULT_COMPLIANCE_CONFIG,
) -> ScreeningRecommendation:
    """Combine the compliance score and safety into a recommendation.

    approve: score >= approve band and safe
    reject:  score < reject band, or unsafe
    review:  anything in between
    """
    if not is_safe or overall_score < config.screening_reject_score:
        return ScreeningRecommendation.REJECT
    if overall_score >= config.screening_approve_score:
        return ScreeningRecommendation.APPROVE
    return ScreeningRecommendation.REVIEW


class ScreeningService(LoggingMixin):
    """Initial screening of submitted text."""

    def __init__(
        self,
        submissions: SubmissionRepositoryProtocol,
        scorer: ComplianceScorer,
        judgment: JudgmentServiceProtocol,
        audit: AuditOutbox,
        time_authority: TimeAuthorityProtocol,
        config: ComplianceConfig = DEFAULT_COMPLIANCE_CONFIG,
        call_timeout_seconds: float = DEFAULT_CALL_TIMEOUT_SECONDS,
    ) -> None:
        self._submissions = submissions
        self._scorer = scorer
        self._judgment = judgment
        self._audit = audit
        self._time = time_authority
        self._config = config
        self._call_timeout_seconds = call_timeout_seconds
        self._init_logger(component="screening")

    async def screen(
        self, submission_id: UUID, rescreen: bool = False
    ) -> ComplianceEvaluation:
        """Screen a submission and record the evaluation.

        Args:
            submission_id: The submission to screen.
            rescreen: Allow screening a submission that previously failed.

        Returns:
            The stored ComplianceEvaluation.

        Raises:
            SubmissionNotFoundError: Unknown submission.
            SubmissionStateError: Submission is not awaiting screening.
            NoActivePrinciplesError: No principle is active; status restored.
        """
        log = self._log_operation("screen", submission_id=str(submission_id))

        submission = await self._submissions.get(submission_id)
        if submission is None:
            raise SubmissionNotFoundError(submission_id)

        allowed: tuple[SubmissionStatus, ...] = (SubmissionStatus.SUBMITTED,)
        if rescreen:
            allowed += (SubmissionStatus.SCREENING_FAILED,)
        if submission.status not in allowed:
            raise SubmissionStateError(
                submission_id, submission.status, allowed, operation="screen"
            )

        previous = submission
        submission = submission.with_status(SubmissionStatus.SCREENING, self._time.now())
        await self._submissions.update(submission)
        log.info("screening_started", rescreen=rescreen)

        try:
            compliance, safety, language, plagiarism = await asyncio.gather(
                self._scorer.check(
                    submission.raw_text, CheckType.SUBMISSION, subject_id=submission.id
                ),
                self._assess_safety(submission.raw_text),
                self._assess_language(submission.raw_text),
                self._check_plagiarism(submission.raw_text),
            )
        except Exception:
            await self._submissions.update(
                previous.with_status(previous.status, self._time.now())
            )
            log.error("screening_aborted", restored_status=previous.status.value)
            raise

        recommendation = decide_recommendation(
            weighted_score(compliance.principle_scores), safety.is_safe, self._config
        )
        now = self._time.now()
        evaluation = ComplianceEvaluation.create(
            subject_id=submission.id,
            compliance=compliance,
            safety=safety,
            language=language,
            plagiarism=plagiarism,
            recommendation=recommendation,
            created_at=now,
        )
        await self._submissions.save_evaluation(evaluation)

        if recommendation == ScreeningRecommendation.APPROVE:
            submission = submission.with_status(
                SubmissionStatus.SCREENING_PASSED,
                now,
                compliance_score=compliance.overall_score,
                rejection_reason=None,
            )
        else:
            submission = submission.with_status(
                SubmissionStatus.SCREENING_FAILED,
                now,
                compliance_score=compliance.overall_score,
                rejection_reason=_rejection_reason(compliance, safety),
            )
        await self._submissions.update(submission)

        self._audit.record(
            AuditEventType.SUBMISSION_SCREENED,
            ActorKind.AI,
            subject_type="submission",
            subject_id=submission.id,
            details={
                "recommendation": recommendation.value,
                "overall_score": compliance.overall_score,
                "is_safe": safety.is_safe,
                "safety_flags": [flag.value for flag in safety.flags],
                "language_score": round(language.score, 4),
            },
        )
        log.info(
            "screening_completed",
            recommendation=recommendation.value,
            overall_score=compliance.overall_score,
            is_safe=safety.is_safe,
            status=submission.status.value,
        )
        return evaluation

    async def _assess_safety(self, text: str) -> SafetyAssessment:
        try:
            return await asyncio.wait_for(
                self._judgment.assess_safety(text),
                timeout=self._call_timeout_seconds,
            )
        except Exception as exc:
            self._log.warning("safety_assessment_failed", error=str(exc))
            return SafetyAssessment(
                is_safe=False,
                reasoning=f"safety assessment unavailable: {exc}",
            )

    async def _assess_language(self, text: str) -> LanguageQuality:
        try:
            return await asyncio.wait_for(
                self._judgment.assess_language(text),
                timeout=self._call_timeout_seconds,
            )
        except Exception as exc:
            self._log.warning("language_assessment_failed", error=str(exc))
            neutral = self._config.neutral_score
            return LanguageQuality(
                fluency=neutral,
                grammar=neutral,
                notes=f"language assessment unavailable: {exc}",
            )

    async def _check_plagiarism(self, text: str) -> PlagiarismResult:
        # No detector is wired in yet.
        return PlagiarismResult()


def _rejection_reason(compliance: ComplianceResult, safety: SafetyAssessment) -> str:
    if not safety.is_safe:
        if safety.flags:
            flags = ", ".join(flag.value for flag in safety.flags)
            return f"Safety concerns: {flags}. {compliance.recommendation}"
        return f"Safety could not be confirmed. {compliance.recommendation}"
    return compliance.recommendation
