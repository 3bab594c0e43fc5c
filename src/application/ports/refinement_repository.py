"""Refinement ledger port.

The ledger is append-only: records are never updated or deleted.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from src.domain.models.refinement import RefinementRecord


class RefinementRepositoryProtocol(Protocol):
    """Protocol for refinement record storage."""

    async def append(self, record: RefinementRecord) -> None:
        """Append a record.

        Raises:
            InvalidStageTransitionError: If a record for the same stage
                already exists (a concurrent advance won the race).
        """
        ...

    async def latest(self, submission_id: UUID) -> RefinementRecord | None:
        """Return the most advanced record for a submission, or None."""
        ...

    async def history(self, submission_id: UUID) -> list[RefinementRecord]:
        """Return all records for a submission in stage order."""
        ...
