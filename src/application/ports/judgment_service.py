"""Judgment service port.

The judgment service scores text against one principle at a time and
performs the safety and language-quality assessments used by screening.
Implementations raise ExternalServiceError subclasses on failure so that
callers can tell "unavailable" apart from "low score".
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from src.domain.models.compliance import (
    LanguageQuality,
    Principle,
    PrincipleJudgment,
    SafetyAssessment,
)


@runtime_checkable
class JudgmentServiceProtocol(Protocol):
    """Protocol for compliance judgment calls."""

    async def evaluate_principle(
        self, text: str, principle: Principle
    ) -> PrincipleJudgment:
        """Score text against a single principle.

        Args:
            text: The text under evaluation.
            principle: The principle to apply.

        Returns:
            PrincipleJudgment with a score (may be outside [0, 1]; callers clamp)
            and reasoning.

        Raises:
            EvaluatorUnavailableError: Transport failure or timeout.
            EvaluatorResponseError: Response did not match the schema.
        """
        ...

    async def assess_safety(self, text: str) -> SafetyAssessment:
        """Assess text for unsafe content.

        Raises:
            ExternalServiceError: On any failure.
        """
        ...

    async def assess_language(self, text: str) -> LanguageQuality:
        """Assess fluency and grammar.

        Raises:
            ExternalServiceError: On any failure.
        """
        ...
