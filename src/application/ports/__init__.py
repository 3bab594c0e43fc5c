"""Application ports - Abstract interfaces for infrastructure adapters.

This module defines the contracts that infrastructure adapters must implement.
Ports enable dependency inversion and make the application layer testable.

Available ports:
- Evaluators: JudgmentServiceProtocol, RewritingServiceProtocol,
  SimilarityServiceProtocol, PlacementAnalyzerProtocol, PanelEvaluatorProtocol
- Storage: Submission, Principle, Refinement, Voting, Revision and Entry
  repositories, ContributorDirectoryProtocol, AuditSinkProtocol
- Cross-cutting: TimeAuthorityProtocol, RateLimiterPort
"""

from src.application.ports.audit_sink import AuditQuery, AuditSinkProtocol
from src.application.ports.contributor_directory import ContributorDirectoryProtocol
from src.application.ports.entry_repository import EntryRepositoryProtocol
from src.application.ports.judgment_service import JudgmentServiceProtocol
from src.application.ports.panel_evaluator import PanelEvaluatorProtocol
from src.application.ports.placement_analyzer import PlacementAnalyzerProtocol
from src.application.ports.principle_repository import PrincipleRepositoryProtocol
from src.application.ports.rate_limiter import RateLimiterPort, RateLimitResult
from src.application.ports.refinement_repository import RefinementRepositoryProtocol
from src.application.ports.revision_repository import RevisionRepositoryProtocol
from src.application.ports.rewriting_service import RewritingServiceProtocol
from src.application.ports.similarity_service import SimilarityServiceProtocol
from src.application.ports.submission_repository import SubmissionRepositoryProtocol
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.ports.voting_repository import VotingRepositoryProtocol

__all__: list[str] = [
    "AuditQuery",
    "AuditSinkProtocol",
    "ContributorDirectoryProtocol",
    "EntryRepositoryProtocol",
    "JudgmentServiceProtocol",
    "PanelEvaluatorProtocol",
    "PlacementAnalyzerProtocol",
    "PrincipleRepositoryProtocol",
    "RateLimitResult",
    "RateLimiterPort",
    "RefinementRepositoryProtocol",
    "RevisionRepositoryProtocol",
    "RewritingServiceProtocol",
    "SimilarityServiceProtocol",
    "SubmissionRepositoryProtocol",
    "TimeAuthorityProtocol",
    "VotingRepositoryProtocol",
]
