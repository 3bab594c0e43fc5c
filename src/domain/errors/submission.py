"""Submission intake and lifecycle errors."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from src.domain.exceptions import GovernanceError

if TYPE_CHECKING:
    from src.domain.models.submission import SubmissionStatus


class SubmissionError(GovernanceError):
    """Base class for submission-related errors."""

    pass


class InvalidSubmissionError(SubmissionError):
    """Raised when submission input fails validation.

    Attributes:
        field: The offending field.
        reason: What was wrong with it.
    """

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid submission {field}: {reason}")


class SubmissionNotFoundError(SubmissionError):
    """Raised when a submission does not exist.

    Attributes:
        submission_id: The requested submission.
    """

    def __init__(self, submission_id: UUID) -> None:
        self.submission_id = submission_id
        super().__init__(f"Submission not found: {submission_id}")


class SubmissionStateError(SubmissionError):
    """Raised when an operation is not allowed in the submission's status.

    Attributes:
        submission_id: The submission.
        current_status: Its status at call time.
        allowed: Statuses in which the operation is permitted.
    """

    def __init__(
        self,
        submission_id: UUID,
        current_status: SubmissionStatus,
        allowed: tuple[SubmissionStatus, ...],
        operation: str,
    ) -> None:
        self.submission_id = submission_id
        self.current_status = current_status
        self.allowed = allowed
        self.operation = operation
        allowed_str = ", ".join(s.value for s in allowed)
        super().__init__(
            f"Cannot {operation} submission {submission_id} in status "
            f"{current_status.value}; allowed: {allowed_str}"
        )
