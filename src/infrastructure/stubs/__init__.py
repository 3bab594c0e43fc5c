"""Infrastructure stubs for development and testing.

In-memory implementations of the repository and evaluator ports. The
development server wires these in when no DATABASE_URL is configured.

Available stubs:
- SubmissionRepositoryStub, PrincipleRepositoryStub, RefinementRepositoryStub
- VotingRepositoryStub: vote uniqueness and counters under one lock
- RevisionRepositoryStub, EntryRepositoryStub, ContributorDirectoryStub
- AuditSinkStub: injectable append failures
- RateLimiterStub: per (action, actor) sliding window
- JudgmentServiceStub, RewritingServiceStub, SimilarityServiceStub,
  PlacementAnalyzerStub, PanelEvaluatorStub: deterministic evaluators

WARNING: These stubs are NOT for production use.
Production implementations are in src/infrastructure/adapters/.
"""

from src.infrastructure.stubs.audit_sink_stub import AuditSinkStub
from src.infrastructure.stubs.contributor_directory_stub import (
    ContributorDirectoryStub,
)
from src.infrastructure.stubs.entry_repository_stub import EntryRepositoryStub
from src.infrastructure.stubs.evaluator_stubs import (
    JudgmentServiceStub,
    PanelEvaluatorStub,
    PlacementAnalyzerStub,
    RewritingServiceStub,
    SimilarityServiceStub,
)
from src.infrastructure.stubs.principle_repository_stub import (
    DEFAULT_PRINCIPLES,
    PrincipleRepositoryStub,
)
from src.infrastructure.stubs.rate_limiter_stub import RateLimiterStub
from src.infrastructure.stubs.refinement_repository_stub import (
    RefinementRepositoryStub,
)
from src.infrastructure.stubs.revision_repository_stub import (
    DEFAULT_COUNCIL,
    RevisionRepositoryStub,
)
from src.infrastructure.stubs.submission_repository_stub import (
    SubmissionRepositoryStub,
)
from src.infrastructure.stubs.voting_repository_stub import VotingRepositoryStub

__all__: list[str] = [
    "AuditSinkStub",
    "ContributorDirectoryStub",
    "DEFAULT_COUNCIL",
    "DEFAULT_PRINCIPLES",
    "EntryRepositoryStub",
    "JudgmentServiceStub",
    "PanelEvaluatorStub",
    "PlacementAnalyzerStub",
    "PrincipleRepositoryStub",
    "RateLimiterStub",
    "RefinementRepositoryStub",
    "RevisionRepositoryStub",
    "RewritingServiceStub",
    "SimilarityServiceStub",
    "SubmissionRepositoryStub",
    "VotingRepositoryStub",
]
