"""Compliance scorer.

Scores a text against every active principle and reduces the scores to a
single weighted value compared with a per-check-type threshold.

Principles are evaluated concurrently. A principle whose evaluation fails
or times out is scored at the neutral value so that a single flaky call
never blocks the pipeline; the failure is visible on the returned
PrincipleScore and in the logs.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from uuid import UUID

from src.application.ports.judgment_service import JudgmentServiceProtocol
from src.application.ports.principle_repository import PrincipleRepositoryProtocol
from src.application.services.audit_outbox import AuditOutbox
from src.application.services.base import LoggingMixin
from src.config.governance_config import DEFAULT_COMPLIANCE_CONFIG, ComplianceConfig
from src.domain.errors.compliance import NoActivePrinciplesError
from src.domain.models.audit_event import ActorKind, AuditEventType
from src.domain.models.compliance import (
    CheckType,
    ComplianceResult,
    Principle,
    PrincipleScore,
)

DEFAULT_CALL_TIMEOUT_SECONDS = 30.0


def weighted_score(scores: Sequence[PrincipleScore]) -> float:
    """Weighted mean of principle scores; 0.0 when the total weight is zero."""
    total_weight = sum(s.weight for s in scores)
    if total_weight == 0:
        return 0.0
    return sum(s.weight * s.score for s in scores) / total_weight


def clamp_score(value: float) -> float:
    return max(0.0, min(1.0, value))


class ComplianceScorer(LoggingMixin):
    """Weighted multi-principle compliance check."""

    def __init__(
        self,
        principles: PrincipleRepositoryProtocol,
        judgment: JudgmentServiceProtocol,
        audit: AuditOutbox | None = None,
        config: ComplianceConfig = DEFAULT_COMPLIANCE_CONFIG,
        call_timeout_seconds: float = DEFAULT_CALL_TIMEOUT_SECONDS,
    ) -> None:
        self._principles = principles
        self._judgment = judgment
        self._audit = audit
        self._config = config
        self._call_timeout_seconds = call_timeout_seconds
        self._init_logger(component="compliance")

    def threshold_for(self, check_type: CheckType) -> float:
        """Pass threshold for a check type."""
        return {
            CheckType.SUBMISSION: self._config.submission_threshold,
            CheckType.REVISION: self._config.revision_threshold,
            CheckType.AMENDMENT: self._config.amendment_threshold,
        }[check_type]

    async def check(
        self,
        text: str,
        check_type: CheckType = CheckType.SUBMISSION,
        subject_id: UUID | None = None,
    ) -> ComplianceResult:
        """Score text against all active principles.

        Args:
            text: Text under evaluation.
            check_type: Selects the pass threshold.
            subject_id: Submission or proposal being checked, for the audit
                trail. No audit event is written when omitted.

        Returns:
            ComplianceResult with per-principle detail.

        Raises:
            NoActivePrinciplesError: If no principle is active.
        """
        log = self._log_operation("check", check_type=check_type.value)

        principles = sorted(
            await self._principles.list_active(), key=lambda p: p.priority
        )
        if not principles:
            log.error("no_active_principles")
            raise NoActivePrinciplesError()

        scores = await asyncio.gather(
            *(self._score_principle(text, principle) for principle in principles)
        )

        raw_overall = weighted_score(scores)
        threshold = self.threshold_for(check_type)
        compliant = raw_overall >= threshold
        overall = round(raw_overall, 4)
        result = ComplianceResult(
            check_type=check_type,
            overall_score=overall,
            threshold=threshold,
            compliant=compliant,
            principle_scores=tuple(scores),
            recommendation=self._recommend(
                scores, overall, threshold, check_type, compliant
            ),
        )

        log.info(
            "compliance_checked",
            overall_score=overall,
            threshold=threshold,
            compliant=compliant,
            principles=len(scores),
            failed_evaluations=result.failed_evaluations,
        )

        if self._audit is not None and subject_id is not None:
            self._audit.record(
                AuditEventType.CONSTITUTION_CHECK,
                ActorKind.AI,
                subject_type=check_type.value,
                subject_id=subject_id,
                details={
                    "overall_score": overall,
                    "threshold": threshold,
                    "compliant": compliant,
                    "failed_evaluations": result.failed_evaluations,
                },
            )
        return result

    async def _score_principle(self, text: str, principle: Principle) -> PrincipleScore:
        try:
            judgment = await asyncio.wait_for(
                self._judgment.evaluate_principle(text, principle),
                timeout=self._call_timeout_seconds,
            )
        except Exception as exc:
            self._log.warning(
                "principle_evaluation_failed",
                principle_id=principle.id,
                error=str(exc) or type(exc).__name__,
            )
            return PrincipleScore(
                principle_id=principle.id,
                principle_name=principle.name,
                weight=principle.weight,
                score=self._config.neutral_score,
                rationale=f"evaluation error: {str(exc) or type(exc).__name__}",
                failed=True,
            )
        return PrincipleScore(
            principle_id=principle.id,
            principle_name=principle.name,
            weight=principle.weight,
            score=clamp_score(judgment.score),
            rationale=judgment.reasoning,
        )

    def _recommend(
        self,
        scores: Sequence[PrincipleScore],
        overall: float,
        threshold: float,
        check_type: CheckType,
        compliant: bool,
    ) -> str:
        if compliant:
            return (
                f"Compliant: overall score {overall:.2f} meets the "
                f"{check_type.value} threshold of {threshold:.2f}."
            )
        weakest = sorted(
            (s for s in scores if s.score < threshold), key=lambda s: s.score
        )[: self._config.max_weak_principles]
        message = (
            f"Not compliant: overall score {overall:.2f} is below the "
            f"{check_type.value} threshold of {threshold:.2f}."
        )
        if weakest:
            named = ", ".join(f"{s.principle_name} ({s.score:.2f})" for s in weakest)
            message += f" Weakest principles: {named}."
        return message
