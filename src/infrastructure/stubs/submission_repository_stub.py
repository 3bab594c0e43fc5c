"""In-memory submission repository for development and testing."""

from __future__ import annotations

from uuid import UUID

from src.application.ports.submission_repository import SubmissionRepositoryProtocol
from src.domain.errors.submission import SubmissionNotFoundError
from src.domain.models.compliance import ComplianceEvaluation
from src.domain.models.submission import Submission


class SubmissionRepositoryStub(SubmissionRepositoryProtocol):
    """Dictionary-backed SubmissionRepositoryProtocol.

    Attributes:
        update_calls: Number of update() calls, for status-flow assertions.
    """

    def __init__(self) -> None:
        self._submissions: dict[UUID, Submission] = {}
        self._evaluations: dict[UUID, list[ComplianceEvaluation]] = {}
        self.update_calls = 0

    def clear(self) -> None:
        self._submissions.clear()
        self._evaluations.clear()
        self.update_calls = 0

    def add_submission(self, submission: Submission) -> None:
        """Seed a submission directly."""
        self._submissions[submission.id] = submission

    async def save(self, submission: Submission) -> None:
        self._submissions[submission.id] = submission

    async def get(self, submission_id: UUID) -> Submission | None:
        return self._submissions.get(submission_id)

    async def update(self, submission: Submission) -> None:
        if submission.id not in self._submissions:
            raise SubmissionNotFoundError(submission.id)
        self._submissions[submission.id] = submission
        self.update_calls += 1

    async def save_evaluation(self, evaluation: ComplianceEvaluation) -> None:
        self._evaluations.setdefault(evaluation.subject_id, []).append(evaluation)

    async def list_evaluations(self, submission_id: UUID) -> list[ComplianceEvaluation]:
        return list(self._evaluations.get(submission_id, []))
