"""Compliance scoring errors."""

from src.domain.exceptions import GovernanceError


class ComplianceError(GovernanceError):
    """Base class for compliance-related errors."""

    pass


class NoActivePrinciplesError(ComplianceError):
    """Raised when no active principle set is configured.

    Scoring without principles would produce a meaningless score, so the
    whole operation is aborted and nothing is written.
    """

    def __init__(self) -> None:
        super().__init__(
            "No active principles configured; compliance check cannot run"
        )
