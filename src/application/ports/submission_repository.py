"""Submission repository port.

Stores submissions and their screening evaluations. Implementations may
use PostgreSQL, in-memory storage, or other backends.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from src.domain.models.compliance import ComplianceEvaluation
from src.domain.models.submission import Submission


class SubmissionRepositoryProtocol(Protocol):
    """Protocol for submission storage operations."""

    async def save(self, submission: Submission) -> None:
        """Insert a new submission."""
        ...

    async def get(self, submission_id: UUID) -> Submission | None:
        """Retrieve a submission by id, or None."""
        ...

    async def update(self, submission: Submission) -> None:
        """Replace a stored submission with an updated copy.

        Raises:
            SubmissionNotFoundError: If the submission does not exist.
        """
        ...

    async def save_evaluation(self, evaluation: ComplianceEvaluation) -> None:
        """Append a screening evaluation. Evaluations are never modified."""
        ...

    async def list_evaluations(self, submission_id: UUID) -> list[ComplianceEvaluation]:
        """List evaluations for a submission, oldest first."""
        ...
