"""Governance pipeline configuration.

Thresholds, windows and ratios used by the compliance scorer, the refinement
state machine, the consensus engine, the revision workflow and the HTTP rate
limiter. Every value can be overridden from the environment for tuning.

Environment Variables (Compliance):
- COMPLIANCE_SUBMISSION_THRESHOLD: Pass threshold for submissions (default: 0.70)
- COMPLIANCE_REVISION_THRESHOLD: Pass threshold for revisions (default: 0.75)
- COMPLIANCE_AMENDMENT_THRESHOLD: Pass threshold for amendments (default: 0.80)

Environment Variables (Refinement):
- REFINEMENT_SIMILARITY_WARNING: Drift warning threshold (default: 0.90)

Environment Variables (Voting):
- VOTING_QUORUM_FRACTION: Fraction of eligible humans that must vote (default: 0.10)
- VOTING_WINDOW_DAYS: Length of a voting session (default: 7)
- VOTING_PANEL_BATCH_SIZE: Concurrent automated evaluations per batch (default: 5)

Environment Variables (Revision):
- REVISION_DISCUSSION_DAYS: Discussion window length (default: 7)
- REVISION_COOLDOWN_DAYS: Cooldown after a rejection (default: 30)
- REVISION_ESCALATED_COOLDOWN_DAYS: Cooldown after repeated rejections (default: 180)

Environment Variables (Rate Limit):
- SUBMISSION_RATE_LIMIT_PER_MINUTE: Submissions per actor per minute (default: 10)
- VOTE_RATE_LIMIT_PER_MINUTE: Votes per actor per minute (default: 20)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import timedelta


def _get_int_env(key: str, default: int) -> int:
    """Get integer environment variable with default.

    Args:
        key: Environment variable name.
        default: Default value if not set or invalid.

    Returns:
        Parsed integer value or default.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float_env(key: str, default: float) -> float:
    """Get float environment variable with default.

    Args:
        key: Environment variable name.
        default: Default value if not set or invalid.

    Returns:
        Parsed float value or default.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _validate_fraction(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must be between 0.0 and 1.0, got {value}")


# =============================================================================
# Compliance Configuration
# =============================================================================

DEFAULT_SUBMISSION_THRESHOLD = 0.70
DEFAULT_REVISION_THRESHOLD = 0.75
DEFAULT_AMENDMENT_THRESHOLD = 0.80

# Score assigned to a principle whose evaluation failed
NEUTRAL_PRINCIPLE_SCORE = 0.5

# Weakest principles named in a non-compliant recommendation
MAX_WEAK_PRINCIPLES_REPORTED = 3

# Screening recommendation bands
DEFAULT_SCREENING_APPROVE_SCORE = 0.70
DEFAULT_SCREENING_REJECT_SCORE = 0.50


@dataclass(frozen=True)
class ComplianceConfig:
    """Configuration for the compliance scorer and initial screening.

    Attributes:
        submission_threshold: Pass threshold for check type "submission".
        revision_threshold: Pass threshold for check type "revision".
        amendment_threshold: Pass threshold for check type "amendment".
        neutral_score: Score substituted for a failed principle evaluation.
        max_weak_principles: Weakest principles named when non-compliant.
        screening_approve_score: Minimum score for an "approve" screening.
        screening_reject_score: Scores below this are rejected outright.
    """

    submission_threshold: float = DEFAULT_SUBMISSION_THRESHOLD
    revision_threshold: float = DEFAULT_REVISION_THRESHOLD
    amendment_threshold: float = DEFAULT_AMENDMENT_THRESHOLD
    neutral_score: float = NEUTRAL_PRINCIPLE_SCORE
    max_weak_principles: int = MAX_WEAK_PRINCIPLES_REPORTED
    screening_approve_score: float = DEFAULT_SCREENING_APPROVE_SCORE
    screening_reject_score: float = DEFAULT_SCREENING_REJECT_SCORE

    def __post_init__(self) -> None:
        """Validate configuration values."""
        for name in (
            "submission_threshold",
            "revision_threshold",
            "amendment_threshold",
            "neutral_score",
            "screening_approve_score",
            "screening_reject_score",
        ):
            _validate_fraction(name, getattr(self, name))
        if self.max_weak_principles < 1:
            raise ValueError(
                f"max_weak_principles must be positive, got {self.max_weak_principles}"
            )
        if self.screening_reject_score > self.screening_approve_score:
            raise ValueError(
                "screening_reject_score must not exceed screening_approve_score"
            )

    @classmethod
    def from_environment(cls) -> ComplianceConfig:
        """Create config from environment variables with defaults.

        Returns:
            ComplianceConfig with values from environment or defaults.
        """
        return cls(
            submission_threshold=_get_float_env(
                "COMPLIANCE_SUBMISSION_THRESHOLD", DEFAULT_SUBMISSION_THRESHOLD
            ),
            revision_threshold=_get_float_env(
                "COMPLIANCE_REVISION_THRESHOLD", DEFAULT_REVISION_THRESHOLD
            ),
            amendment_threshold=_get_float_env(
                "COMPLIANCE_AMENDMENT_THRESHOLD", DEFAULT_AMENDMENT_THRESHOLD
            ),
        )


# =============================================================================
# Refinement Configuration
# =============================================================================

DEFAULT_SIMILARITY_WARNING_THRESHOLD = 0.90

# Similarity assumed when the similarity service cannot be reached
FALLBACK_SIMILARITY_SCORE = 0.95


@dataclass(frozen=True)
class RefinementConfig:
    """Configuration for the refinement state machine.

    Attributes:
        similarity_warning_threshold: Similarity below this raises a
            non-blocking drift warning.
        fallback_similarity: Similarity recorded when the similarity
            service is unavailable.
    """

    similarity_warning_threshold: float = DEFAULT_SIMILARITY_WARNING_THRESHOLD
    fallback_similarity: float = FALLBACK_SIMILARITY_SCORE

    def __post_init__(self) -> None:
        """Validate configuration values."""
        _validate_fraction(
            "similarity_warning_threshold", self.similarity_warning_threshold
        )
        _validate_fraction("fallback_similarity", self.fallback_similarity)

    @classmethod
    def from_environment(cls) -> RefinementConfig:
        """Create config from environment variables with defaults."""
        return cls(
            similarity_warning_threshold=_get_float_env(
                "REFINEMENT_SIMILARITY_WARNING", DEFAULT_SIMILARITY_WARNING_THRESHOLD
            ),
        )


# =============================================================================
# Voting Configuration
# =============================================================================

DEFAULT_QUORUM_FRACTION = 0.10
DEFAULT_VOTING_WINDOW_DAYS = 7
MIN_VOTING_WINDOW_DAYS = 1
MAX_VOTING_WINDOW_DAYS = 30

# Smallest automated panel, regardless of eligible human count
MIN_PANEL_SIZE = 5

# Concurrent automated evaluations per batch
DEFAULT_PANEL_BATCH_SIZE = 5

# Approval thresholds keyed by subject type value
DEFAULT_APPROVAL_THRESHOLDS: dict[str, float] = {
    "new_submission": 0.60,
    "revision": 0.70,
    "amendment": 0.80,
    "archive_restore": 0.60,
}

# Panel category ratios; meta takes the remainder
TRADITION_RATIO = 0.4
FUNCTION_RATIO = 0.3
CONTRARIAN_RATIO = 0.2


@dataclass(frozen=True)
class VotingConfig:
    """Configuration for voting sessions and the automated panel.

    Attributes:
        approval_thresholds: Approval threshold per subject type.
        quorum_fraction: Fraction of eligible humans that must vote.
        window_days: Session length in days.
        min_panel_size: Lower bound on the automated panel.
        panel_batch_size: Evaluations run concurrently per batch.
        tradition_ratio: Share of the panel drawn from tradition perspectives.
        function_ratio: Share drawn from function perspectives.
        contrarian_ratio: Share drawn from contrarian perspectives.
    """

    approval_thresholds: dict[str, float] = field(
        default_factory=lambda: dict(DEFAULT_APPROVAL_THRESHOLDS)
    )
    quorum_fraction: float = DEFAULT_QUORUM_FRACTION
    window_days: int = DEFAULT_VOTING_WINDOW_DAYS
    min_panel_size: int = MIN_PANEL_SIZE
    panel_batch_size: int = DEFAULT_PANEL_BATCH_SIZE
    tradition_ratio: float = TRADITION_RATIO
    function_ratio: float = FUNCTION_RATIO
    contrarian_ratio: float = CONTRARIAN_RATIO

    def __post_init__(self) -> None:
        """Validate configuration values."""
        _validate_fraction("quorum_fraction", self.quorum_fraction)
        for subject_type, threshold in self.approval_thresholds.items():
            _validate_fraction(f"approval_thresholds[{subject_type}]", threshold)
        if not MIN_VOTING_WINDOW_DAYS <= self.window_days <= MAX_VOTING_WINDOW_DAYS:
            raise ValueError(
                f"window_days must be between {MIN_VOTING_WINDOW_DAYS} "
                f"and {MAX_VOTING_WINDOW_DAYS}, got {self.window_days}"
            )
        if self.min_panel_size < 1:
            raise ValueError(
                f"min_panel_size must be positive, got {self.min_panel_size}"
            )
        if self.panel_batch_size < 1:
            raise ValueError(
                f"panel_batch_size must be positive, got {self.panel_batch_size}"
            )
        if self.tradition_ratio + self.function_ratio + self.contrarian_ratio > 1.0:
            raise ValueError("panel category ratios must leave room for meta")

    @property
    def window(self) -> timedelta:
        """Session length as a timedelta."""
        return timedelta(days=self.window_days)

    def threshold_for(self, subject_type: str) -> float:
        """Look up the approval threshold for a subject type.

        Args:
            subject_type: Subject type value (e.g. "revision").

        Returns:
            The approval threshold.

        Raises:
            KeyError: If no threshold is configured for the subject type.
        """
        return self.approval_thresholds[subject_type]

    @classmethod
    def from_environment(cls) -> VotingConfig:
        """Create config from environment variables with defaults."""
        window_days = _get_int_env("VOTING_WINDOW_DAYS", DEFAULT_VOTING_WINDOW_DAYS)
        window_days = max(
            MIN_VOTING_WINDOW_DAYS, min(window_days, MAX_VOTING_WINDOW_DAYS)
        )
        return cls(
            quorum_fraction=_get_float_env(
                "VOTING_QUORUM_FRACTION", DEFAULT_QUORUM_FRACTION
            ),
            window_days=window_days,
            panel_batch_size=max(
                1, _get_int_env("VOTING_PANEL_BATCH_SIZE", DEFAULT_PANEL_BATCH_SIZE)
            ),
        )


# =============================================================================
# Revision Configuration
# =============================================================================

DEFAULT_DISCUSSION_DAYS = 7
DEFAULT_COOLDOWN_DAYS = 30
DEFAULT_ESCALATED_COOLDOWN_DAYS = 180

# Rejection count at which the escalated cooldown applies
COOLDOWN_ESCALATION_COUNT = 3


@dataclass(frozen=True)
class RevisionConfig:
    """Configuration for the revision proposal workflow.

    Attributes:
        discussion_days: Length of the discussion window.
        cooldown_days: Cooldown applied after a rejection.
        escalated_cooldown_days: Cooldown once rejections reach the
            escalation count.
        escalation_count: Rejection count that triggers the escalated cooldown.
    """

    discussion_days: int = DEFAULT_DISCUSSION_DAYS
    cooldown_days: int = DEFAULT_COOLDOWN_DAYS
    escalated_cooldown_days: int = DEFAULT_ESCALATED_COOLDOWN_DAYS
    escalation_count: int = COOLDOWN_ESCALATION_COUNT

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.discussion_days < 0:
            raise ValueError(
                f"discussion_days must be non-negative, got {self.discussion_days}"
            )
        if self.cooldown_days < 0 or self.escalated_cooldown_days < self.cooldown_days:
            raise ValueError(
                "cooldown_days must be non-negative and not exceed "
                f"escalated_cooldown_days, got {self.cooldown_days} / "
                f"{self.escalated_cooldown_days}"
            )
        if self.escalation_count < 1:
            raise ValueError(
                f"escalation_count must be positive, got {self.escalation_count}"
            )

    @property
    def discussion_window(self) -> timedelta:
        """Discussion window as a timedelta."""
        return timedelta(days=self.discussion_days)

    def cooldown_for(self, rejection_count: int) -> timedelta:
        """Cooldown applied after the given number of rejections.

        Args:
            rejection_count: Rejections recorded including the current one.

        Returns:
            Cooldown duration.
        """
        if rejection_count >= self.escalation_count:
            return timedelta(days=self.escalated_cooldown_days)
        return timedelta(days=self.cooldown_days)

    @classmethod
    def from_environment(cls) -> RevisionConfig:
        """Create config from environment variables with defaults."""
        return cls(
            discussion_days=_get_int_env(
                "REVISION_DISCUSSION_DAYS", DEFAULT_DISCUSSION_DAYS
            ),
            cooldown_days=_get_int_env("REVISION_COOLDOWN_DAYS", DEFAULT_COOLDOWN_DAYS),
            escalated_cooldown_days=_get_int_env(
                "REVISION_ESCALATED_COOLDOWN_DAYS", DEFAULT_ESCALATED_COOLDOWN_DAYS
            ),
        )


# =============================================================================
# Rate Limit Configuration
# =============================================================================

DEFAULT_SUBMISSION_RATE_LIMIT = 10
DEFAULT_VOTE_RATE_LIMIT = 20
DEFAULT_RATE_LIMIT_WINDOW_SECONDS = 60


@dataclass(frozen=True)
class RateLimitConfig:
    """Per-actor sliding-window rate limits for write endpoints.

    Attributes:
        submissions_per_window: Submissions allowed per actor per window.
        votes_per_window: Votes allowed per actor per window.
        window_seconds: Sliding window length.
    """

    submissions_per_window: int = DEFAULT_SUBMISSION_RATE_LIMIT
    votes_per_window: int = DEFAULT_VOTE_RATE_LIMIT
    window_seconds: int = DEFAULT_RATE_LIMIT_WINDOW_SECONDS

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.submissions_per_window < 1 or self.votes_per_window < 1:
            raise ValueError("rate limits must be positive")
        if self.window_seconds < 1:
            raise ValueError(
                f"window_seconds must be positive, got {self.window_seconds}"
            )

    @classmethod
    def from_environment(cls) -> RateLimitConfig:
        """Create config from environment variables with defaults."""
        return cls(
            submissions_per_window=_get_int_env(
                "SUBMISSION_RATE_LIMIT_PER_MINUTE", DEFAULT_SUBMISSION_RATE_LIMIT
            ),
            votes_per_window=_get_int_env(
                "VOTE_RATE_LIMIT_PER_MINUTE", DEFAULT_VOTE_RATE_LIMIT
            ),
        )


# Pre-defined configurations

DEFAULT_COMPLIANCE_CONFIG = ComplianceConfig()
DEFAULT_REFINEMENT_CONFIG = RefinementConfig()
DEFAULT_VOTING_CONFIG = VotingConfig()
DEFAULT_REVISION_CONFIG = RevisionConfig()
DEFAULT_RATE_LIMIT_CONFIG = RateLimitConfig()

# Small panel batches make batch ordering observable in tests
TEST_VOTING_CONFIG = VotingConfig(panel_batch_size=2)
