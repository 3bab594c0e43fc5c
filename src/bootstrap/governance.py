"""Bootstrap wiring for the governance pipeline.

Storage is PostgreSQL when DATABASE_URL is set and in-memory stubs
otherwise. Evaluators call the language model and embeddings endpoints
when their API keys are set and fall back to deterministic stubs
otherwise, so a development server runs with no external services.
"""

from __future__ import annotations

from dataclasses import dataclass

from structlog import get_logger

from src.application.ports.audit_sink import AuditSinkProtocol
from src.application.ports.contributor_directory import ContributorDirectoryProtocol
from src.application.ports.entry_repository import EntryRepositoryProtocol
from src.application.ports.judgment_service import JudgmentServiceProtocol
from src.application.ports.panel_evaluator import PanelEvaluatorProtocol
from src.application.ports.placement_analyzer import PlacementAnalyzerProtocol
from src.application.ports.principle_repository import PrincipleRepositoryProtocol
from src.application.ports.rate_limiter import RateLimiterPort
from src.application.ports.refinement_repository import RefinementRepositoryProtocol
from src.application.ports.revision_repository import RevisionRepositoryProtocol
from src.application.ports.rewriting_service import RewritingServiceProtocol
from src.application.ports.similarity_service import SimilarityServiceProtocol
from src.application.ports.submission_repository import SubmissionRepositoryProtocol
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.ports.voting_repository import VotingRepositoryProtocol
from src.application.services.audit_outbox import AuditOutbox
from src.application.services.automated_panel import AutomatedPanel
from src.application.services.compliance_scorer import ComplianceScorer
from src.application.services.consensus_engine import ConsensusEngine
from src.application.services.placement_service import PlacementService
from src.application.services.refinement_service import RefinementService
from src.application.services.revision_workflow_service import (
    RevisionWorkflowService,
)
from src.application.services.screening_service import ScreeningService
from src.application.services.submission_service import SubmissionService
from src.application.services.time_authority_service import TimeAuthorityService
from src.bootstrap.database import get_session_factory, is_database_configured
from src.config.evaluator_config import EvaluatorServiceConfig
from src.config.governance_config import (
    ComplianceConfig,
    RateLimitConfig,
    RefinementConfig,
    RevisionConfig,
    VotingConfig,
)
from src.infrastructure.adapters.evaluators import (
    EmbeddingSimilarityService,
    LlmJudgmentService,
    LlmPanelEvaluator,
    LlmPlacementAnalyzer,
    LlmRewritingService,
    MessagesClient,
)
from src.infrastructure.adapters.persistence import (
    PostgresAuditSink,
    PostgresContributorDirectory,
    PostgresEntryRepository,
    PostgresPrincipleRepository,
    PostgresRefinementRepository,
    PostgresRevisionRepository,
    PostgresSubmissionRepository,
    PostgresVotingRepository,
)
from src.infrastructure.stubs import (
    DEFAULT_COUNCIL,
    DEFAULT_PRINCIPLES,
    AuditSinkStub,
    ContributorDirectoryStub,
    EntryRepositoryStub,
    JudgmentServiceStub,
    PanelEvaluatorStub,
    PlacementAnalyzerStub,
    PrincipleRepositoryStub,
    RateLimiterStub,
    RefinementRepositoryStub,
    RevisionRepositoryStub,
    RewritingServiceStub,
    SimilarityServiceStub,
    SubmissionRepositoryStub,
    VotingRepositoryStub,
)

logger = get_logger()

SUBMISSION_ACTION = "submission"
VOTE_ACTION = "vote"


@dataclass(frozen=True)
class StoragePorts:
    """Repository ports sharing one backend."""

    submissions: SubmissionRepositoryProtocol
    principles: PrincipleRepositoryProtocol
    refinements: RefinementRepositoryProtocol
    voting: VotingRepositoryProtocol
    revisions: RevisionRepositoryProtocol
    entries: EntryRepositoryProtocol
    contributors: ContributorDirectoryProtocol
    audit_sink: AuditSinkProtocol


@dataclass(frozen=True)
class EvaluatorPorts:
    """External evaluator ports."""

    judgment: JudgmentServiceProtocol
    rewriter: RewritingServiceProtocol
    similarity: SimilarityServiceProtocol
    placement: PlacementAnalyzerProtocol
    panel: PanelEvaluatorProtocol


def build_stub_storage() -> StoragePorts:
    """In-memory storage seeded with the default principles and council."""
    return StoragePorts(
        submissions=SubmissionRepositoryStub(),
        principles=PrincipleRepositoryStub(DEFAULT_PRINCIPLES),
        refinements=RefinementRepositoryStub(),
        voting=VotingRepositoryStub(),
        revisions=RevisionRepositoryStub(DEFAULT_COUNCIL),
        entries=EntryRepositoryStub(),
        contributors=ContributorDirectoryStub(),
        audit_sink=AuditSinkStub(),
    )


def build_postgres_storage() -> StoragePorts:
    """PostgreSQL storage over the shared session factory."""
    factory = get_session_factory()
    return StoragePorts(
        submissions=PostgresSubmissionRepository(factory),
        principles=PostgresPrincipleRepository(factory),
        refinements=PostgresRefinementRepository(factory),
        voting=PostgresVotingRepository(factory),
        revisions=PostgresRevisionRepository(factory),
        entries=PostgresEntryRepository(factory),
        contributors=PostgresContributorDirectory(factory),
        audit_sink=PostgresAuditSink(factory),
    )


def build_stub_evaluators() -> EvaluatorPorts:
    return EvaluatorPorts(
        judgment=JudgmentServiceStub(),
        rewriter=RewritingServiceStub(),
        similarity=SimilarityServiceStub(),
        placement=PlacementAnalyzerStub(),
        panel=PanelEvaluatorStub(),
    )


def build_llm_evaluators(config: EvaluatorServiceConfig) -> EvaluatorPorts:
    """Language model evaluators; similarity uses embeddings when keyed."""
    judgment_client = MessagesClient(config, config.judgment_model, "judgment")
    writing_client = MessagesClient(config, config.writing_model, "rewriting")
    placement_client = MessagesClient(config, config.judgment_model, "placement")
    panel_client = MessagesClient(config, config.judgment_model, "panel")
    similarity: SimilarityServiceProtocol
    if config.embeddings_api_key:
        similarity = EmbeddingSimilarityService(config)
    else:
        similarity = SimilarityServiceStub()
    return EvaluatorPorts(
        judgment=LlmJudgmentService(judgment_client),
        rewriter=LlmRewritingService(writing_client),
        similarity=similarity,
        placement=LlmPlacementAnalyzer(placement_client),
        panel=LlmPanelEvaluator(panel_client),
    )


_time_authority: TimeAuthorityProtocol | None = None
_storage: StoragePorts | None = None
_evaluators: EvaluatorPorts | None = None
_evaluator_config: EvaluatorServiceConfig | None = None
_audit_outbox: AuditOutbox | None = None
_rate_limiter: RateLimiterPort | None = None
_scorer: ComplianceScorer | None = None
_screening_service: ScreeningService | None = None
_submission_service: SubmissionService | None = None
_refinement_service: RefinementService | None = None
_consensus_engine: ConsensusEngine | None = None
_revision_service: RevisionWorkflowService | None = None
_placement_service: PlacementService | None = None


def get_time_authority() -> TimeAuthorityProtocol:
    global _time_authority
    if _time_authority is None:
        _time_authority = TimeAuthorityService()
    return _time_authority


def get_evaluator_config() -> EvaluatorServiceConfig:
    global _evaluator_config
    if _evaluator_config is None:
        _evaluator_config = EvaluatorServiceConfig.from_environment()
    return _evaluator_config


def get_storage() -> StoragePorts:
    """Get repository ports, choosing the backend on first call."""
    global _storage
    if _storage is None:
        if is_database_configured():
            _storage = build_postgres_storage()
            logger.info("governance_storage_selected", backend="postgres")
        else:
            _storage = build_stub_storage()
            logger.warning("governance_storage_selected", backend="memory")
    return _storage


def get_evaluators() -> EvaluatorPorts:
    """Get evaluator ports, choosing real or stub evaluators on first call."""
    global _evaluators
    if _evaluators is None:
        config = get_evaluator_config()
        if config.api_key:
            _evaluators = build_llm_evaluators(config)
            logger.info("governance_evaluators_selected", backend="llm")
        else:
            _evaluators = build_stub_evaluators()
            logger.warning("governance_evaluators_selected", backend="stub")
    return _evaluators


def get_audit_outbox() -> AuditOutbox:
    global _audit_outbox
    if _audit_outbox is None:
        _audit_outbox = AuditOutbox(get_storage().audit_sink, get_time_authority())
    return _audit_outbox


def get_rate_limiter() -> RateLimiterPort:
    global _rate_limiter
    if _rate_limiter is None:
        config = RateLimitConfig.from_environment()
        _rate_limiter = RateLimiterStub(
            limits={
                SUBMISSION_ACTION: config.submissions_per_window,
                VOTE_ACTION: config.votes_per_window,
            },
            time_authority=get_time_authority(),
            window_seconds=config.window_seconds,
        )
    return _rate_limiter


def get_compliance_scorer() -> ComplianceScorer:
    global _scorer
    if _scorer is None:
        _scorer = ComplianceScorer(
            principles=get_storage().principles,
            judgment=get_evaluators().judgment,
            audit=get_audit_outbox(),
            config=ComplianceConfig.from_environment(),
            call_timeout_seconds=get_evaluator_config().timeout_seconds,
        )
    return _scorer


def get_screening_service() -> ScreeningService:
    global _screening_service
    if _screening_service is None:
        _screening_service = ScreeningService(
            submissions=get_storage().submissions,
            scorer=get_compliance_scorer(),
            judgment=get_evaluators().judgment,
            audit=get_audit_outbox(),
            time_authority=get_time_authority(),
            config=ComplianceConfig.from_environment(),
            call_timeout_seconds=get_evaluator_config().timeout_seconds,
        )
    return _screening_service


def get_submission_service() -> SubmissionService:
    global _submission_service
    if _submission_service is None:
        storage = get_storage()
        _submission_service = SubmissionService(
            submissions=storage.submissions,
            refinements=storage.refinements,
            screening=get_screening_service(),
            audit=get_audit_outbox(),
            time_authority=get_time_authority(),
        )
    return _submission_service


def get_refinement_service() -> RefinementService:
    global _refinement_service
    if _refinement_service is None:
        storage = get_storage()
        evaluators = get_evaluators()
        _refinement_service = RefinementService(
            submissions=storage.submissions,
            refinements=storage.refinements,
            rewriter=evaluators.rewriter,
            similarity=evaluators.similarity,
            audit=get_audit_outbox(),
            time_authority=get_time_authority(),
            config=RefinementConfig.from_environment(),
            call_timeout_seconds=get_evaluator_config().timeout_seconds,
        )
    return _refinement_service


def get_consensus_engine() -> ConsensusEngine:
    global _consensus_engine
    if _consensus_engine is None:
        storage = get_storage()
        config = VotingConfig.from_environment()
        panel = AutomatedPanel(
            evaluator=get_evaluators().panel,
            time_authority=get_time_authority(),
            config=config,
            call_timeout_seconds=get_evaluator_config().timeout_seconds,
        )
        _consensus_engine = ConsensusEngine(
            voting=storage.voting,
            submissions=storage.submissions,
            contributors=storage.contributors,
            panel=panel,
            audit=get_audit_outbox(),
            time_authority=get_time_authority(),
            config=config,
        )
    return _consensus_engine


def get_revision_service() -> RevisionWorkflowService:
    global _revision_service
    if _revision_service is None:
        storage = get_storage()
        _revision_service = RevisionWorkflowService(
            revisions=storage.revisions,
            entries=storage.entries,
            scorer=get_compliance_scorer(),
            engine=get_consensus_engine(),
            evaluator=get_evaluators().panel,
            audit=get_audit_outbox(),
            time_authority=get_time_authority(),
            config=RevisionConfig.from_environment(),
            call_timeout_seconds=get_evaluator_config().timeout_seconds,
        )
    return _revision_service


def get_placement_service() -> PlacementService:
    global _placement_service
    if _placement_service is None:
        storage = get_storage()
        _placement_service = PlacementService(
            submissions=storage.submissions,
            refinements=storage.refinements,
            entries=storage.entries,
            analyzer=get_evaluators().placement,
            audit=get_audit_outbox(),
            time_authority=get_time_authority(),
            call_timeout_seconds=get_evaluator_config().timeout_seconds,
        )
    return _placement_service


def set_time_authority(time_authority: TimeAuthorityProtocol) -> None:
    """Set custom time authority for testing."""
    global _time_authority
    _time_authority = time_authority


def set_storage(storage: StoragePorts) -> None:
    """Set custom storage ports for testing."""
    global _storage
    _storage = storage


def set_evaluators(evaluators: EvaluatorPorts) -> None:
    """Set custom evaluator ports for testing."""
    global _evaluators
    _evaluators = evaluators


def set_rate_limiter(rate_limiter: RateLimiterPort) -> None:
    """Set custom rate limiter for testing."""
    global _rate_limiter
    _rate_limiter = rate_limiter


def reset_governance_dependencies() -> None:
    """Reset all singleton instances for testing."""
    global _time_authority
    global _storage
    global _evaluators
    global _evaluator_config
    global _audit_outbox
    global _rate_limiter
    global _scorer
    global _screening_service
    global _submission_service
    global _refinement_service
    global _consensus_engine
    global _revision_service
    global _placement_service

    _time_authority = None
    _storage = None
    _evaluators = None
    _evaluator_config = None
    _audit_outbox = None
    _rate_limiter = None
    _scorer = None
    _screening_service = None
    _submission_service = None
    _refinement_service = None
    _consensus_engine = None
    _revision_service = None
    _placement_service = None
