"""Refinement state machine.

Advances a submission's text one stage at a time through
raw -> draft -> refined -> canonical. Each advance rewrites the latest
text with stage-specific instructions, measures similarity to the input
and appends an immutable RefinementRecord.

A similarity below the drift threshold is a warning, not a failure: the
record is written with its warning flag set and the caller decides.
"""

from __future__ import annotations

import asyncio
import hashlib
from dataclasses import dataclass
from uuid import UUID

from src.application.ports.refinement_repository import RefinementRepositoryProtocol
from src.application.ports.rewriting_service import RewritingServiceProtocol
from src.application.ports.similarity_service import SimilarityServiceProtocol
from src.application.ports.submission_repository import SubmissionRepositoryProtocol
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.services.audit_outbox import AuditOutbox
from src.application.services.base import LoggingMixin
from src.application.services.compliance_scorer import (
    DEFAULT_CALL_TIMEOUT_SECONDS,
    clamp_score,
)
from src.config.governance_config import DEFAULT_REFINEMENT_CONFIG, RefinementConfig
from src.domain.errors.refinement import (
    InvalidStageTransitionError,
    RefinementFailedError,
)
from src.domain.errors.submission import SubmissionNotFoundError
from src.domain.models.audit_event import ActorKind, AuditEventType
from src.domain.models.refinement import (
    STAGE_INSTRUCTIONS,
    RefinementRecord,
    RefinementStage,
)
from src.domain.models.submission import Submission, SubmissionStatus


@dataclass(frozen=True)
class RefinementOutcome:
    """Result of one advance.

    Attributes:
        record: The appended record.
        warning: Drift warning message, or None when similarity was fine.
    """

    record: RefinementRecord
    warning: str | None = None


def compute_prompt_hash(
    stage: RefinementStage, instructions: str, input_text: str
) -> str:
    """SHA-256 over the stage, its instructions and the input text."""
    payload = f"{stage.value}\n{instructions}\n{input_text}".encode()
    return hashlib.sha256(payload).hexdigest()


# Status a submission moves to after each stage, and the statuses it may
# be in for that move to apply.
_STATUS_AFTER_STAGE: dict[
    RefinementStage, tuple[SubmissionStatus, tuple[SubmissionStatus, ...]]
] = {
    RefinementStage.DRAFT: (
        SubmissionStatus.REFINING,
        (SubmissionStatus.SCREENING_PASSED,),
    ),
    RefinementStage.REFINED: (
        SubmissionStatus.REFINING,
        (SubmissionStatus.SCREENING_PASSED, SubmissionStatus.REFINING),
    ),
    RefinementStage.CANONICAL: (
        SubmissionStatus.REFINED,
        (SubmissionStatus.SCREENING_PASSED, SubmissionStatus.REFINING),
    ),
}


class RefinementService(LoggingMixin):
    """Stage-by-stage text refinement with drift detection."""

    def __init__(
        self,
        submissions: SubmissionRepositoryProtocol,
        refinements: RefinementRepositoryProtocol,
        rewriter: RewritingServiceProtocol,
        similarity: SimilarityServiceProtocol,
        audit: AuditOutbox,
        time_authority: TimeAuthorityProtocol,
        config: RefinementConfig = DEFAULT_REFINEMENT_CONFIG,
        call_timeout_seconds: float = DEFAULT_CALL_TIMEOUT_SECONDS,
    ) -> None:
        self._submissions = submissions
        self._refinements = refinements
        self._rewriter = rewriter
        self._similarity = similarity
        self._audit = audit
        self._time = time_authority
        self._config = config
        self._call_timeout_seconds = call_timeout_seconds
        self._init_logger(component="refinement")

    async def current_stage(self, submission_id: UUID) -> RefinementStage:
        """Stage of the latest record, or RAW when nothing was refined."""
        await self._require_submission(submission_id)
        latest = await self._refinements.latest(submission_id)
        return latest.stage if latest is not None else RefinementStage.RAW

    async def history(self, submission_id: UUID) -> list[RefinementRecord]:
        """All records for the submission, oldest first."""
        await self._require_submission(submission_id)
        return await self._refinements.history(submission_id)

    async def latest_text(self, submission_id: UUID) -> str:
        """Latest refined text, or the raw text when nothing was refined."""
        submission = await self._require_submission(submission_id)
        latest = await self._refinements.latest(submission_id)
        return latest.text_ko if latest is not None else submission.raw_text

    async def advance(
        self, submission_id: UUID, target_stage: RefinementStage
    ) -> RefinementOutcome:
        """Advance the submission to target_stage.

        Args:
            submission_id: The submission.
            target_stage: Must be the successor of the current stage.

        Returns:
            RefinementOutcome with the appended record and any drift warning.

        Raises:
            SubmissionNotFoundError: Unknown submission.
            InvalidStageTransitionError: target_stage is not the next stage.
            RefinementFailedError: Rewriting failed; nothing was written.
        """
        log = self._log_operation(
            "advance",
            submission_id=str(submission_id),
            target_stage=target_stage.value,
        )
        submission = await self._require_submission(submission_id)

        latest = await self._refinements.latest(submission_id)
        current = latest.stage if latest is not None else RefinementStage.RAW
        expected = current.successor()
        if target_stage != expected:
            log.warning(
                "invalid_stage_transition",
                current_stage=current.value,
                expected_stage=expected.value if expected else None,
            )
            raise InvalidStageTransitionError(
                submission_id, current, target_stage, expected
            )

        input_text = latest.text_ko if latest is not None else submission.raw_text
        instructions = STAGE_INSTRUCTIONS[target_stage]

        try:
            rewrite = await asyncio.wait_for(
                self._rewriter.rewrite(input_text, target_stage, instructions),
                timeout=self._call_timeout_seconds,
            )
        except Exception as exc:
            log.error("rewrite_failed", error=str(exc) or type(exc).__name__)
            raise RefinementFailedError(
                submission_id, target_stage, str(exc) or type(exc).__name__
            ) from exc

        if not rewrite.text_ko.strip():
            log.error("rewrite_empty")
            raise RefinementFailedError(
                submission_id, target_stage, "rewriting service returned empty text"
            )

        similarity = await self._measure_similarity(input_text, rewrite.text_ko)
        warning: str | None = None
        if similarity < self._config.similarity_warning_threshold:
            warning = (
                f"Similarity {similarity:.2f} is below "
                f"{self._config.similarity_warning_threshold:.2f}; "
                "the meaning may have drifted."
            )
            log.warning(
                "refinement_similarity_low",
                similarity=similarity,
                threshold=self._config.similarity_warning_threshold,
            )

        now = self._time.now()
        record = RefinementRecord.create(
            submission_id=submission_id,
            stage=target_stage,
            rewrite=rewrite,
            similarity=similarity,
            similarity_warning=warning is not None,
            prompt_hash=compute_prompt_hash(target_stage, instructions, input_text),
            model=self._rewriter.model_name,
            created_at=now,
        )
        await self._refinements.append(record)
        await self._update_status(submission, target_stage)

        self._audit.record(
            AuditEventType.REFINEMENT_COMPLETED,
            ActorKind.AI,
            subject_type="submission",
            subject_id=submission_id,
            details={
                "stage": target_stage.value,
                "similarity": similarity,
                "similarity_warning": warning is not None,
                "model": record.model,
            },
        )
        log.info("refinement_completed", similarity=similarity)
        return RefinementOutcome(record=record, warning=warning)

    async def _measure_similarity(self, before: str, after: str) -> float:
        try:
            value = await asyncio.wait_for(
                self._similarity.similarity(before, after),
                timeout=self._call_timeout_seconds,
            )
        except Exception as exc:
            self._log.warning(
                "similarity_unavailable",
                error=str(exc) or type(exc).__name__,
                fallback=self._config.fallback_similarity,
            )
            return self._config.fallback_similarity
        return clamp_score(value)

    async def _update_status(
        self, submission: Submission, stage: RefinementStage
    ) -> None:
        new_status, applies_from = _STATUS_AFTER_STAGE[stage]
        if submission.status in applies_from and submission.status != new_status:
            await self._submissions.update(
                submission.with_status(new_status, self._time.now())
            )

    async def _require_submission(self, submission_id: UUID) -> Submission:
        submission = await self._submissions.get(submission_id)
        if submission is None:
            raise SubmissionNotFoundError(submission_id)
        return submission
