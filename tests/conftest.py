"""
Pytest configuration and shared fixtures for the governance pipeline tests.

Testing Standards:
- All async tests use pytest.mark.asyncio (auto mode enabled in pyproject.toml)
- Use AsyncMock for async function mocking
- Services are wired to in-memory stubs and a FakeTimeAuthority
- Unit tests go in tests/unit/
- Integration tests go in tests/integration/
"""

import pytest

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
from src.config.governance_config import TEST_VOTING_CONFIG
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
    RefinementRepositoryStub,
    RevisionRepositoryStub,
    RewritingServiceStub,
    SimilarityServiceStub,
    SubmissionRepositoryStub,
    VotingRepositoryStub,
)
from tests.helpers.fake_time_authority import FakeTimeAuthority


@pytest.fixture
def anyio_backend() -> str:
    """Use asyncio as the async backend."""
    return "asyncio"


@pytest.fixture
def project_version() -> str:
    """Provide the current project version for tests."""
    from src import __version__

    return __version__


# Ports


@pytest.fixture
def fake_time() -> FakeTimeAuthority:
    """Frozen clock at 2026-01-01T00:00:00Z."""
    return FakeTimeAuthority()


@pytest.fixture
def judgment() -> JudgmentServiceStub:
    return JudgmentServiceStub()


@pytest.fixture
def rewriter() -> RewritingServiceStub:
    return RewritingServiceStub()


@pytest.fixture
def similarity() -> SimilarityServiceStub:
    return SimilarityServiceStub()


@pytest.fixture
def placement_analyzer() -> PlacementAnalyzerStub:
    return PlacementAnalyzerStub()


@pytest.fixture
def panel_evaluator() -> PanelEvaluatorStub:
    return PanelEvaluatorStub()


@pytest.fixture
def submission_repo() -> SubmissionRepositoryStub:
    return SubmissionRepositoryStub()


@pytest.fixture
def principle_repo() -> PrincipleRepositoryStub:
    """Seeded with the five founding principles."""
    return PrincipleRepositoryStub(DEFAULT_PRINCIPLES)


@pytest.fixture
def refinement_repo() -> RefinementRepositoryStub:
    return RefinementRepositoryStub()


@pytest.fixture
def voting_repo() -> VotingRepositoryStub:
    return VotingRepositoryStub()


@pytest.fixture
def revision_repo() -> RevisionRepositoryStub:
    """Seeded with the three default council members."""
    return RevisionRepositoryStub(DEFAULT_COUNCIL)


@pytest.fixture
def entry_repo() -> EntryRepositoryStub:
    return EntryRepositoryStub()


@pytest.fixture
def contributors() -> ContributorDirectoryStub:
    return ContributorDirectoryStub()


@pytest.fixture
def audit_sink() -> AuditSinkStub:
    return AuditSinkStub()


# Services


@pytest.fixture
def outbox(audit_sink: AuditSinkStub, fake_time: FakeTimeAuthority) -> AuditOutbox:
    """Outbox without a worker; flush() delivers inline."""
    return AuditOutbox(audit_sink, fake_time, retry_delay_seconds=0)


@pytest.fixture
def scorer(
    principle_repo: PrincipleRepositoryStub,
    judgment: JudgmentServiceStub,
    outbox: AuditOutbox,
) -> ComplianceScorer:
    return ComplianceScorer(principle_repo, judgment, audit=outbox)


@pytest.fixture
def screening_service(
    submission_repo: SubmissionRepositoryStub,
    scorer: ComplianceScorer,
    judgment: JudgmentServiceStub,
    outbox: AuditOutbox,
    fake_time: FakeTimeAuthority,
) -> ScreeningService:
    return ScreeningService(submission_repo, scorer, judgment, outbox, fake_time)


@pytest.fixture
def submission_service(
    submission_repo: SubmissionRepositoryStub,
    refinement_repo: RefinementRepositoryStub,
    screening_service: ScreeningService,
    outbox: AuditOutbox,
    fake_time: FakeTimeAuthority,
) -> SubmissionService:
    return SubmissionService(
        submission_repo, refinement_repo, screening_service, outbox, fake_time
    )


@pytest.fixture
def refinement_service(
    submission_repo: SubmissionRepositoryStub,
    refinement_repo: RefinementRepositoryStub,
    rewriter: RewritingServiceStub,
    similarity: SimilarityServiceStub,
    outbox: AuditOutbox,
    fake_time: FakeTimeAuthority,
) -> RefinementService:
    return RefinementService(
        submission_repo, refinement_repo, rewriter, similarity, outbox, fake_time
    )


@pytest.fixture
def automated_panel(
    panel_evaluator: PanelEvaluatorStub, fake_time: FakeTimeAuthority
) -> AutomatedPanel:
    """Panel with a batch size of 2."""
    return AutomatedPanel(panel_evaluator, fake_time, config=TEST_VOTING_CONFIG)


@pytest.fixture
def consensus_engine(
    voting_repo: VotingRepositoryStub,
    submission_repo: SubmissionRepositoryStub,
    contributors: ContributorDirectoryStub,
    automated_panel: AutomatedPanel,
    outbox: AuditOutbox,
    fake_time: FakeTimeAuthority,
) -> ConsensusEngine:
    return ConsensusEngine(
        voting_repo,
        submission_repo,
        contributors,
        automated_panel,
        outbox,
        fake_time,
        config=TEST_VOTING_CONFIG,
    )


@pytest.fixture
def revision_service(
    revision_repo: RevisionRepositoryStub,
    entry_repo: EntryRepositoryStub,
    scorer: ComplianceScorer,
    consensus_engine: ConsensusEngine,
    panel_evaluator: PanelEvaluatorStub,
    outbox: AuditOutbox,
    fake_time: FakeTimeAuthority,
) -> RevisionWorkflowService:
    return RevisionWorkflowService(
        revision_repo,
        entry_repo,
        scorer,
        consensus_engine,
        panel_evaluator,
        outbox,
        fake_time,
    )


@pytest.fixture
def placement_service(
    submission_repo: SubmissionRepositoryStub,
    refinement_repo: RefinementRepositoryStub,
    entry_repo: EntryRepositoryStub,
    placement_analyzer: PlacementAnalyzerStub,
    outbox: AuditOutbox,
    fake_time: FakeTimeAuthority,
) -> PlacementService:
    return PlacementService(
        submission_repo,
        refinement_repo,
        entry_repo,
        placement_analyzer,
        outbox,
        fake_time,
    )
