"""Application services for the governance pipeline.

Services orchestrate domain models and ports; they hold no storage of
their own and reach every external system through a port.
"""

from src.application.services.audit_outbox import AuditOutbox
from src.application.services.automated_panel import (
    AutomatedPanel,
    compute_panel_composition,
    select_perspectives,
)
from src.application.services.base import LoggingMixin
from src.application.services.compliance_scorer import ComplianceScorer
from src.application.services.consensus_engine import ConsensusEngine
from src.application.services.placement_service import PlacementService
from src.application.services.refinement_service import (
    RefinementOutcome,
    RefinementService,
)
from src.application.services.revision_workflow_service import (
    RevisionWorkflowService,
)
from src.application.services.screening_service import (
    ScreeningService,
    decide_recommendation,
)
from src.application.services.submission_service import (
    SubmissionService,
    SubmissionStatusView,
)
from src.application.services.time_authority_service import TimeAuthorityService

__all__: list[str] = [
    "AuditOutbox",
    "AutomatedPanel",
    "ComplianceScorer",
    "ConsensusEngine",
    "LoggingMixin",
    "PlacementService",
    "RefinementOutcome",
    "RefinementService",
    "RevisionWorkflowService",
    "ScreeningService",
    "SubmissionService",
    "SubmissionStatusView",
    "TimeAuthorityService",
    "compute_panel_composition",
    "decide_recommendation",
    "select_perspectives",
]
