"""
API routes for the governance pipeline.

Available routers:
- health: Health check
- submission: Submission intake, status, refinement and placement
- voting: Sessions, human votes, the automated panel and tallies
- revision: Revision proposals, discussion and the revision vote
- audit: Audit trail reads
"""

from src.api.routes.audit import router as audit_router
from src.api.routes.health import router as health_router
from src.api.routes.revision import router as revision_router
from src.api.routes.submission import router as submission_router
from src.api.routes.voting import router as voting_router

__all__: list[str] = [
    "audit_router",
    "health_router",
    "revision_router",
    "submission_router",
    "voting_router",
]
