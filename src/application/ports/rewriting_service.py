"""Rewriting service port used by the refinement state machine."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from src.domain.models.refinement import RefinementStage, RewriteResult


@runtime_checkable
class RewritingServiceProtocol(Protocol):
    """Protocol for stage-specific rewriting."""

    @property
    def model_name(self) -> str:
        """Identifier of the model producing rewrites, stored on records."""
        ...

    async def rewrite(
        self, text: str, stage: RefinementStage, instructions: str
    ) -> RewriteResult:
        """Rewrite text for the given stage.

        Args:
            text: Input text (the previous stage's text).
            stage: Target stage.
            instructions: Stage-specific instructions.

        Returns:
            RewriteResult with a bilingual text pair and change summary.

        Raises:
            EvaluatorUnavailableError: Transport failure or timeout.
            EvaluatorResponseError: Missing or empty fields.
        """
        ...
