"""Unit tests for the governance pipeline configuration.

Tests defaults, validation and environment overrides for compliance,
refinement, voting, revision and rate limit settings.
"""

from __future__ import annotations

import os
from datetime import timedelta
from unittest.mock import patch

import pytest

from src.config.evaluator_config import (
    DEFAULT_TIMEOUT_SECONDS,
    MAX_TIMEOUT_SECONDS,
    EvaluatorServiceConfig,
)
from src.config.governance_config import (
    DEFAULT_VOTING_CONFIG,
    MAX_VOTING_WINDOW_DAYS,
    ComplianceConfig,
    RateLimitConfig,
    RefinementConfig,
    RevisionConfig,
    VotingConfig,
)


class TestComplianceConfig:
    """Tests for ComplianceConfig."""

    def test_defaults(self) -> None:
        """Thresholds tighten from submission to amendment."""
        config = ComplianceConfig()

        assert config.submission_threshold == 0.70
        assert config.revision_threshold == 0.75
        assert config.amendment_threshold == 0.80
        assert config.neutral_score == 0.5

    def test_threshold_outside_unit_interval_rejected(self) -> None:
        """Thresholds must be fractions."""
        with pytest.raises(ValueError, match="submission_threshold"):
            ComplianceConfig(submission_threshold=1.2)

    def test_reject_band_above_approve_band_rejected(self) -> None:
        """The reject band cannot exceed the approve band."""
        with pytest.raises(ValueError, match="screening_reject_score"):
            ComplianceConfig(screening_approve_score=0.6, screening_reject_score=0.7)

    def test_from_environment(self) -> None:
        """Thresholds can be overridden from the environment."""
        with patch.dict(os.environ, {"COMPLIANCE_REVISION_THRESHOLD": "0.9"}):
            config = ComplianceConfig.from_environment()

        assert config.revision_threshold == 0.9
        assert config.submission_threshold == 0.70

    def test_invalid_environment_value_uses_default(self) -> None:
        """Unparseable values fall back to the default."""
        with patch.dict(os.environ, {"COMPLIANCE_SUBMISSION_THRESHOLD": "high"}):
            config = ComplianceConfig.from_environment()

        assert config.submission_threshold == 0.70


class TestRefinementConfig:
    """Tests for RefinementConfig."""

    def test_defaults(self) -> None:
        """Drift warning at 0.90, fallback similarity 0.95."""
        config = RefinementConfig()

        assert config.similarity_warning_threshold == 0.90
        assert config.fallback_similarity == 0.95

    def test_from_environment(self) -> None:
        with patch.dict(os.environ, {"REFINEMENT_SIMILARITY_WARNING": "0.8"}):
            assert RefinementConfig.from_environment().similarity_warning_threshold == 0.8


class TestVotingConfig:
    """Tests for VotingConfig."""

    def test_thresholds_by_subject_type(self) -> None:
        """Each subject type has its own approval threshold."""
        assert DEFAULT_VOTING_CONFIG.threshold_for("new_submission") == 0.60
        assert DEFAULT_VOTING_CONFIG.threshold_for("revision") == 0.70
        assert DEFAULT_VOTING_CONFIG.threshold_for("amendment") == 0.80
        assert DEFAULT_VOTING_CONFIG.threshold_for("archive_restore") == 0.60

    def test_unknown_subject_type(self) -> None:
        """Unknown subject types raise KeyError."""
        with pytest.raises(KeyError):
            DEFAULT_VOTING_CONFIG.threshold_for("referendum")

    def test_window(self) -> None:
        """Default window is seven days."""
        assert DEFAULT_VOTING_CONFIG.window == timedelta(days=7)

    @pytest.mark.parametrize("days", [0, MAX_VOTING_WINDOW_DAYS + 1])
    def test_window_bounds(self, days: int) -> None:
        """Window length must be between 1 and 30 days."""
        with pytest.raises(ValueError, match="window_days"):
            VotingConfig(window_days=days)

    def test_ratios_must_leave_room_for_meta(self) -> None:
        """Tradition, function and contrarian ratios cannot exceed 1."""
        with pytest.raises(ValueError, match="meta"):
            VotingConfig(tradition_ratio=0.5, function_ratio=0.4, contrarian_ratio=0.2)

    def test_from_environment_clamps_window(self) -> None:
        """Out-of-range windows are clamped rather than rejected."""
        with patch.dict(os.environ, {"VOTING_WINDOW_DAYS": "90"}):
            config = VotingConfig.from_environment()

        assert config.window_days == MAX_VOTING_WINDOW_DAYS

    def test_from_environment_quorum(self) -> None:
        with patch.dict(os.environ, {"VOTING_QUORUM_FRACTION": "0.25"}):
            assert VotingConfig.from_environment().quorum_fraction == 0.25


class TestRevisionConfig:
    """Tests for RevisionConfig."""

    def test_cooldown_escalates_at_third_rejection(self) -> None:
        """30 days for the first two rejections, 180 from the third."""
        config = RevisionConfig()

        assert config.cooldown_for(1) == timedelta(days=30)
        assert config.cooldown_for(2) == timedelta(days=30)
        assert config.cooldown_for(3) == timedelta(days=180)
        assert config.cooldown_for(7) == timedelta(days=180)

    def test_discussion_window(self) -> None:
        assert RevisionConfig().discussion_window == timedelta(days=7)

    def test_escalated_cooldown_not_shorter(self) -> None:
        """The escalated cooldown cannot be shorter than the base cooldown."""
        with pytest.raises(ValueError):
            RevisionConfig(cooldown_days=60, escalated_cooldown_days=30)


class TestRateLimitConfig:
    """Tests for RateLimitConfig."""

    def test_defaults(self) -> None:
        config = RateLimitConfig()

        assert config.submissions_per_window == 10
        assert config.votes_per_window == 20
        assert config.window_seconds == 60

    def test_non_positive_limit_rejected(self) -> None:
        with pytest.raises(ValueError):
            RateLimitConfig(votes_per_window=0)

    def test_from_environment(self) -> None:
        with patch.dict(os.environ, {"SUBMISSION_RATE_LIMIT_PER_MINUTE": "3"}):
            assert RateLimitConfig.from_environment().submissions_per_window == 3


class TestEvaluatorServiceConfig:
    """Tests for EvaluatorServiceConfig."""

    def test_api_key_read_from_named_variable(self) -> None:
        """The key is read from the variable named by api_key_env."""
        config = EvaluatorServiceConfig(api_key_env="TEST_EVALUATOR_KEY")

        with patch.dict(os.environ, {"TEST_EVALUATOR_KEY": "secret"}):
            assert config.api_key == "secret"
        with patch.dict(os.environ, {}, clear=True):
            assert config.api_key is None

    def test_timeout_bounds(self) -> None:
        with pytest.raises(ValueError, match="timeout_seconds"):
            EvaluatorServiceConfig(timeout_seconds=0.5)

    def test_from_environment_clamps_timeout(self) -> None:
        with patch.dict(os.environ, {"EVALUATOR_TIMEOUT_SECONDS": "9999"}):
            assert EvaluatorServiceConfig.from_environment().timeout_seconds == MAX_TIMEOUT_SECONDS

    def test_from_environment_defaults(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            config = EvaluatorServiceConfig.from_environment()

        assert config.timeout_seconds == DEFAULT_TIMEOUT_SECONDS
        assert config.base_url == "https://api.anthropic.com"
