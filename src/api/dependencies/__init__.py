"""API dependencies for dependency injection."""

from src.api.dependencies.correlation import get_correlation_id_header
from src.api.dependencies.governance import (
    ACTOR_HEADER,
    get_actor_id,
    get_audit_outbox,
    get_consensus_engine,
    get_rate_limiter,
    get_revision_service,
    get_submission_service,
    get_time_authority,
)

__all__: list[str] = [
    "ACTOR_HEADER",
    "get_actor_id",
    "get_audit_outbox",
    "get_consensus_engine",
    "get_correlation_id_header",
    "get_rate_limiter",
    "get_revision_service",
    "get_submission_service",
    "get_time_authority",
]
