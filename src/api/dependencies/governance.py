"""Governance API dependencies.

Route handlers receive services through these functions; the singletons
themselves live in src.bootstrap.governance so tests can swap ports with
the set_/reset_ helpers there.
"""

from fastapi import Header, HTTPException

from src.application.ports.rate_limiter import RateLimiterPort
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.services.audit_outbox import AuditOutbox
from src.application.services.consensus_engine import ConsensusEngine
from src.application.services.placement_service import PlacementService
from src.application.services.refinement_service import RefinementService
from src.application.services.revision_workflow_service import (
    RevisionWorkflowService,
)
from src.application.services.submission_service import SubmissionService
from src.bootstrap import governance

ACTOR_HEADER = "X-Actor-ID"
MAX_ACTOR_ID_LENGTH = 128


async def get_actor_id(
    x_actor_id: str | None = Header(default=None, alias=ACTOR_HEADER),
) -> str:
    """Read the opaque actor id of the caller.

    Raises:
        HTTPException 401: Header missing, blank or too long.
    """
    actor_id = (x_actor_id or "").strip()
    if not actor_id or len(actor_id) > MAX_ACTOR_ID_LENGTH:
        raise HTTPException(
            status_code=401,
            detail={
                "type": "urn:scripture-evolution:actor:missing",
                "title": "Actor Required",
                "status": 401,
                "detail": f"{ACTOR_HEADER} header must carry a non-empty actor id "
                f"of at most {MAX_ACTOR_ID_LENGTH} characters",
            },
        )
    return actor_id


def get_submission_service() -> SubmissionService:
    return governance.get_submission_service()


def get_consensus_engine() -> ConsensusEngine:
    return governance.get_consensus_engine()


def get_revision_service() -> RevisionWorkflowService:
    return governance.get_revision_service()


def get_audit_outbox() -> AuditOutbox:
    return governance.get_audit_outbox()


def get_rate_limiter() -> RateLimiterPort:
    return governance.get_rate_limiter()


def get_time_authority() -> TimeAuthorityProtocol:
    return governance.get_time_authority()


def get_refinement_service() -> RefinementService:
    return governance.get_refinement_service()


def get_placement_service() -> PlacementService:
    return governance.get_placement_service()
