"""Refinement state machine errors."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from src.domain.exceptions import GovernanceError

if TYPE_CHECKING:
    from src.domain.models.refinement import RefinementStage


class RefinementError(GovernanceError):
    """Base class for refinement-related errors."""

    pass


class InvalidStageTransitionError(RefinementError):
    """Raised when an advance does not target the successor stage.

    Stages progress strictly raw -> draft -> refined -> canonical with no
    skipping and no rollback.

    Attributes:
        submission_id: The submission being refined.
        current_stage: Stage derived from the latest record.
        target_stage: The requested stage.
        expected_stage: The only valid target, or None when current is final.
    """

    def __init__(
        self,
        submission_id: UUID,
        current_stage: RefinementStage,
        target_stage: RefinementStage,
        expected_stage: RefinementStage | None,
    ) -> None:
        self.submission_id = submission_id
        self.current_stage = current_stage
        self.target_stage = target_stage
        self.expected_stage = expected_stage

        expected_str = expected_stage.value if expected_stage else "None (final)"
        super().__init__(
            f"Invalid refinement transition for {submission_id} from "
            f"{current_stage.value} to {target_stage.value}. "
            f"Expected next stage: {expected_str}"
        )


class RefinementFailedError(RefinementError):
    """Raised when the rewriting step fails.

    The submission stays at its prior stage; no record is written.

    Attributes:
        submission_id: The submission being refined.
        target_stage: The stage that could not be produced.
    """

    def __init__(
        self, submission_id: UUID, target_stage: RefinementStage, reason: str
    ) -> None:
        self.submission_id = submission_id
        self.target_stage = target_stage
        self.reason = reason
        super().__init__(
            f"Refinement of {submission_id} to {target_stage.value} failed: {reason}"
        )
