"""Domain errors for the governance pipeline.

Provides specific exception classes for different failure scenarios.
All exceptions inherit from GovernanceError.
"""

from src.domain.errors.compliance import ComplianceError, NoActivePrinciplesError
from src.domain.errors.evaluator import (
    EvaluatorResponseError,
    EvaluatorUnavailableError,
    ExternalServiceError,
)
from src.domain.errors.placement import (
    EntryNotFoundError,
    PlacementCollisionError,
    PlacementError,
    StaleEntryVersionError,
)
from src.domain.errors.rate_limit import RateLimitExceededError
from src.domain.errors.refinement import (
    InvalidStageTransitionError,
    RefinementError,
    RefinementFailedError,
)
from src.domain.errors.revision import (
    DiscussionWindowOpenError,
    InvalidRevisionError,
    InvalidRevisionStateError,
    RevisionCooldownActiveError,
    RevisionError,
    RevisionNotApprovedError,
    RevisionNotFoundError,
)
from src.domain.errors.submission import (
    InvalidSubmissionError,
    SubmissionError,
    SubmissionNotFoundError,
    SubmissionStateError,
)
from src.domain.errors.voting import (
    ActiveSessionExistsError,
    DuplicateVoteError,
    InvalidSessionStateError,
    InvalidSessionTransitionError,
    InvalidVoteChoiceError,
    VotingError,
    VotingSessionNotFoundError,
    VotingWindowClosedError,
)

__all__: list[str] = [
    "ActiveSessionExistsError",
    "ComplianceError",
    "DiscussionWindowOpenError",
    "DuplicateVoteError",
    "EntryNotFoundError",
    "EvaluatorResponseError",
    "EvaluatorUnavailableError",
    "ExternalServiceError",
    "InvalidRevisionError",
    "InvalidRevisionStateError",
    "InvalidSessionStateError",
    "InvalidSessionTransitionError",
    "InvalidStageTransitionError",
    "InvalidSubmissionError",
    "InvalidVoteChoiceError",
    "NoActivePrinciplesError",
    "PlacementCollisionError",
    "PlacementError",
    "RateLimitExceededError",
    "RefinementError",
    "RefinementFailedError",
    "RevisionCooldownActiveError",
    "RevisionError",
    "RevisionNotApprovedError",
    "RevisionNotFoundError",
    "StaleEntryVersionError",
    "SubmissionError",
    "SubmissionNotFoundError",
    "SubmissionStateError",
    "VotingError",
    "VotingSessionNotFoundError",
    "VotingWindowClosedError",
]
