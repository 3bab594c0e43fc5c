"""Configuration module for the governance pipeline.

Available Configurations:
- ComplianceConfig: Compliance thresholds and screening bands
- RefinementConfig: Semantic drift warning threshold
- VotingConfig: Approval thresholds, quorum, window and panel sizing
- RevisionConfig: Discussion window and cooldown escalation
- RateLimitConfig: Per-actor write limits
- EvaluatorServiceConfig: External evaluator endpoints and timeouts
"""

from src.config.evaluator_config import (
    DEFAULT_EVALUATOR_CONFIG,
    EvaluatorServiceConfig,
)
from src.config.governance_config import (
    DEFAULT_COMPLIANCE_CONFIG,
    DEFAULT_RATE_LIMIT_CONFIG,
    DEFAULT_REFINEMENT_CONFIG,
    DEFAULT_REVISION_CONFIG,
    DEFAULT_VOTING_CONFIG,
    TEST_VOTING_CONFIG,
    ComplianceConfig,
    RateLimitConfig,
    RefinementConfig,
    RevisionConfig,
    VotingConfig,
)

__all__ = [
    "ComplianceConfig",
    "RefinementConfig",
    "VotingConfig",
    "RevisionConfig",
    "RateLimitConfig",
    "EvaluatorServiceConfig",
    "DEFAULT_COMPLIANCE_CONFIG",
    "DEFAULT_REFINEMENT_CONFIG",
    "DEFAULT_VOTING_CONFIG",
    "DEFAULT_REVISION_CONFIG",
    "DEFAULT_RATE_LIMIT_CONFIG",
    "DEFAULT_EVALUATOR_CONFIG",
    "TEST_VOTING_CONFIG",
]
