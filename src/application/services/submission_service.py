"""Submission intake.

Validates and stores new submissions, then screens them immediately
unless they are kept as drafts. A screening that cannot run leaves the
submission in submitted status for a later rescreen.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from src.application.ports.refinement_repository import RefinementRepositoryProtocol
from src.application.ports.submission_repository import SubmissionRepositoryProtocol
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.services.audit_outbox import AuditOutbox
from src.application.services.base import LoggingMixin
from src.application.services.screening_service import ScreeningService
from src.domain.errors.compliance import ComplianceError
from src.domain.errors.submission import InvalidSubmissionError, SubmissionNotFoundError
from src.domain.models.audit_event import ActorKind, AuditEventType
from src.domain.models.compliance import ComplianceEvaluation
from src.domain.models.refinement import RefinementStage
from src.domain.models.submission import (
    MAX_TITLE_LENGTH,
    Submission,
    SubmissionType,
)


@dataclass(frozen=True)
class SubmissionStatusView:
    """Read model returned by get_status.

    Attributes:
        submission: The submission.
        refinement_stage: Stage of the latest refinement record.
        latest_evaluation: Most recent screening, if any.
    """

    submission: Submission
    refinement_stage: RefinementStage
    latest_evaluation: ComplianceEvaluation | None


class SubmissionService(LoggingMixin):
    """Accepts submissions and reports their status."""

    def __init__(
        self,
        submissions: SubmissionRepositoryProtocol,
        refinements: RefinementRepositoryProtocol,
        screening: ScreeningService,
        audit: AuditOutbox,
        time_authority: TimeAuthorityProtocol,
    ) -> None:
        self._submissions = submissions
        self._refinements = refinements
        self._screening = screening
        self._audit = audit
        self._time = time_authority
        self._init_logger(component="intake")

    async def submit(
        self,
        owner_id: str,
        submission_type: SubmissionType | str,
        title: str,
        text: str,
        draft: bool = False,
    ) -> Submission:
        """Create a submission and screen it unless it is a draft.

        Args:
            owner_id: Submitter's actor id.
            submission_type: Declared type (enum or its value).
            title: Title, at most 200 characters.
            text: Body, within the type's length ceiling.
            draft: Keep as draft without screening.

        Returns:
            The submission as it stands after screening.

        Raises:
            InvalidSubmissionError: Validation failed.
        """
        submission_type = _parse_type(submission_type)
        title = title.strip()
        text = text.strip()
        if not title:
            raise InvalidSubmissionError("title", "must not be empty")
        if len(title) > MAX_TITLE_LENGTH:
            raise InvalidSubmissionError(
                "title", f"must be at most {MAX_TITLE_LENGTH} characters"
            )
        if not text:
            raise InvalidSubmissionError("text", "must not be empty")
        if len(text) > submission_type.max_length:
            raise InvalidSubmissionError(
                "text",
                f"must be at most {submission_type.max_length} characters "
                f"for type {submission_type.value}",
            )

        submission = Submission.create(
            owner_id=owner_id,
            submission_type=submission_type,
            title=title,
            raw_text=text,
            created_at=self._time.now(),
            draft=draft,
        )
        log = self._log_operation(
            "submit",
            submission_id=str(submission.id),
            submission_type=submission_type.value,
        )
        await self._submissions.save(submission)
        self._audit.record(
            AuditEventType.SUBMISSION_CREATED,
            ActorKind.HUMAN,
            subject_type="submission",
            subject_id=submission.id,
            actor_id=owner_id,
            details={"submission_type": submission_type.value, "draft": draft},
        )
        log.info("submission_created", draft=draft)

        if draft:
            return submission
        try:
            await self._screening.screen(submission.id)
        except ComplianceError as exc:
            log.warning("screening_deferred", error=str(exc))
        return await self._require(submission.id)

    async def get_status(self, submission_id: UUID) -> SubmissionStatusView:
        """Current status, refinement stage and latest screening.

        Raises:
            SubmissionNotFoundError: Unknown submission.
        """
        submission = await self._require(submission_id)
        latest = await self._refinements.latest(submission_id)
        evaluations = await self._submissions.list_evaluations(submission_id)
        return SubmissionStatusView(
            submission=submission,
            refinement_stage=latest.stage if latest else RefinementStage.RAW,
            latest_evaluation=evaluations[-1] if evaluations else None,
        )

    async def _require(self, submission_id: UUID) -> Submission:
        submission = await self._submissions.get(submission_id)
        if submission is None:
            raise SubmissionNotFoundError(submission_id)
        return submission


def _parse_type(value: SubmissionType | str) -> SubmissionType:
    if isinstance(value, SubmissionType):
        return value
    try:
        return SubmissionType(value.strip().lower())
    except (ValueError, AttributeError):
        allowed = ", ".join(t.value for t in SubmissionType)
        raise InvalidSubmissionError(
            "submission_type", f"must be one of {allowed}"
        ) from None
