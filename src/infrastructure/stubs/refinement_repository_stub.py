"""In-memory append-only refinement ledger."""

from __future__ import annotations

from uuid import UUID

from src.application.ports.refinement_repository import RefinementRepositoryProtocol
from src.domain.errors.refinement import InvalidStageTransitionError
from src.domain.models.refinement import RefinementRecord, RefinementStage


class RefinementRepositoryStub(RefinementRepositoryProtocol):
    """Records are kept per submission in stage order.

    append() enforces the same one-record-per-stage rule as the unique
    (submission_id, stage) index of the database schema.
    """

    def __init__(self) -> None:
        self._records: dict[UUID, list[RefinementRecord]] = {}

    def clear(self) -> None:
        self._records.clear()

    async def append(self, record: RefinementRecord) -> None:
        history = self._records.setdefault(record.submission_id, [])
        current = history[-1].stage if history else RefinementStage.RAW
        if any(existing.stage == record.stage for existing in history):
            raise InvalidStageTransitionError(
                record.submission_id, current, record.stage, current.successor()
            )
        history.append(record)

    async def latest(self, submission_id: UUID) -> RefinementRecord | None:
        history = self._records.get(submission_id)
        return history[-1] if history else None

    async def history(self, submission_id: UUID) -> list[RefinementRecord]:
        return list(self._records.get(submission_id, []))
