"""End-to-end pipeline test on the in-memory ports.

Walks one text through intake, screening, refinement, voting with the
automated panel, placement and a community revision, then checks the
audit trail recorded each step.
"""

from datetime import timedelta

import pytest

from src.application.ports.audit_sink import AuditQuery, MAX_AUDIT_PAGE_SIZE
from src.application.services.audit_outbox import AuditOutbox
from src.application.services.consensus_engine import ConsensusEngine
from src.application.services.placement_service import PlacementService
from src.application.services.refinement_service import RefinementService
from src.application.services.revision_workflow_service import RevisionWorkflowService
from src.application.services.submission_service import SubmissionService
from src.domain.models.audit_event import AuditEventType
from src.domain.models.published_entry import ChangeType
from src.domain.models.refinement import RefinementStage
from src.domain.models.revision_proposal import RevisionStatus
from src.domain.models.submission import SubmissionStatus, SubmissionType
from src.domain.models.vote import VoteChoice
from src.domain.models.voting_session import SessionStatus, SubjectType
from src.infrastructure.stubs import EntryRepositoryStub, SubmissionRepositoryStub
from tests.helpers import FakeTimeAuthority

REVISED_TEXT = "Patience is the quiet root from which every kindness grows."


class TestPipelineEndToEnd:
    """Submission to published entry to revised entry."""

    @pytest.mark.asyncio
    async def test_full_pipeline(
        self,
        submission_service: SubmissionService,
        refinement_service: RefinementService,
        consensus_engine: ConsensusEngine,
        placement_service: PlacementService,
        revision_service: RevisionWorkflowService,
        submission_repo: SubmissionRepositoryStub,
        entry_repo: EntryRepositoryStub,
        outbox: AuditOutbox,
        fake_time: FakeTimeAuthority,
    ) -> None:
        submission = await submission_service.submit(
            owner_id="author-1",
            submission_type=SubmissionType.WISDOM,
            title="On patience",
            text="Patience is the quiet root of every kindness.",
        )
        assert submission.status == SubmissionStatus.SCREENING_PASSED

        for stage in (
            RefinementStage.DRAFT,
            RefinementStage.REFINED,
            RefinementStage.CANONICAL,
        ):
            await refinement_service.advance(submission.id, stage)
        assert await refinement_service.current_stage(submission.id) == (
            RefinementStage.CANONICAL
        )
        canonical_text = await refinement_service.latest_text(submission.id)

        session = await consensus_engine.create_session(
            submission.id, SubjectType.NEW_SUBMISSION
        )
        voters = await consensus_engine.generate_automated_voters(
            session.id, canonical_text
        )
        await consensus_engine.cast_vote(session.id, "reader-1", VoteChoice.FOR)
        result = await consensus_engine.tally(session.id)

        assert len(voters) >= 5
        assert result.outcome == SessionStatus.APPROVED
        approved = await submission_repo.get(submission.id)
        assert approved is not None
        assert approved.status == SubmissionStatus.APPROVED

        entry = await placement_service.place(submission.id)

        assert entry.id == "1:1"
        assert entry.text_ko == canonical_text
        registered = await submission_repo.get(submission.id)
        assert registered is not None
        assert registered.status == SubmissionStatus.REGISTERED
        assert registered.related_entry_id == entry.id

        proposal = await revision_service.propose(
            entry.id, "reader-2", REVISED_TEXT, "Gentler rhythm."
        )
        assert proposal.status == RevisionStatus.DISCUSSION
        fake_time.advance(delta=timedelta(days=7))
        revision_session = await revision_service.start_vote(proposal.id)
        await consensus_engine.cast_vote(revision_session.id, "reader-3", VoteChoice.FOR)
        await consensus_engine.tally(revision_session.id)

        revised = await revision_service.apply(proposal.id)

        assert revised.version == 2
        assert revised.text_ko == REVISED_TEXT
        versions = await entry_repo.list_versions(entry.id)
        assert [v.change_type for v in versions] == [
            ChangeType.FOUNDING,
            ChangeType.COMMUNITY_REVISION,
        ]
        assert versions[-1].text_ko == canonical_text

        events, _ = await outbox.query(AuditQuery(limit=MAX_AUDIT_PAGE_SIZE))
        recorded = {event.event_type for event in events}
        assert {
            AuditEventType.SUBMISSION_CREATED,
            AuditEventType.SUBMISSION_SCREENED,
            AuditEventType.REFINEMENT_COMPLETED,
            AuditEventType.VOTING_CREATED,
            AuditEventType.VOTE_CAST,
            AuditEventType.CONTENT_PLACED,
            AuditEventType.REVISION_PROPOSED,
            AuditEventType.REVISION_APPROVED,
        } <= recorded
