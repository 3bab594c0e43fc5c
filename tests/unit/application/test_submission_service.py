"""Unit tests for SubmissionService (intake and status)."""

from __future__ import annotations

import pytest
from uuid6 import uuid7

from src.application.services.audit_outbox import AuditOutbox
from src.application.services.submission_service import SubmissionService
from src.domain.errors.submission import InvalidSubmissionError, SubmissionNotFoundError
from src.domain.models.audit_event import ActorKind, AuditEventType
from src.domain.models.refinement import RefinementStage
from src.domain.models.submission import SubmissionStatus, SubmissionType
from src.infrastructure.stubs import (
    AuditSinkStub,
    PrincipleRepositoryStub,
    SubmissionRepositoryStub,
)


class TestSubmitValidation:
    """Tests for input validation."""

    @pytest.mark.asyncio
    async def test_empty_title(self, submission_service: SubmissionService) -> None:
        with pytest.raises(InvalidSubmissionError) as exc_info:
            await submission_service.submit("user-1", "wisdom", "   ", "text")

        assert exc_info.value.field == "title"

    @pytest.mark.asyncio
    async def test_title_too_long(self, submission_service: SubmissionService) -> None:
        with pytest.raises(InvalidSubmissionError) as exc_info:
            await submission_service.submit("user-1", "wisdom", "t" * 201, "text")

        assert exc_info.value.field == "title"

    @pytest.mark.asyncio
    async def test_empty_text(self, submission_service: SubmissionService) -> None:
        with pytest.raises(InvalidSubmissionError) as exc_info:
            await submission_service.submit("user-1", "wisdom", "title", "\n")

        assert exc_info.value.field == "text"

    @pytest.mark.asyncio
    async def test_text_over_type_limit(
        self, submission_service: SubmissionService
    ) -> None:
        """501 characters is too long for wisdom but fine for a story."""
        text = "a" * 501

        with pytest.raises(InvalidSubmissionError) as exc_info:
            await submission_service.submit("user-1", "wisdom", "title", text)
        assert exc_info.value.field == "text"

        story = await submission_service.submit("user-1", SubmissionType.STORY, "title", text)
        assert story.submission_type == SubmissionType.STORY

    @pytest.mark.asyncio
    async def test_unknown_type(self, submission_service: SubmissionService) -> None:
        with pytest.raises(InvalidSubmissionError) as exc_info:
            await submission_service.submit("user-1", "sermon", "title", "text")

        assert exc_info.value.field == "submission_type"


class TestSubmit:
    """Tests for SubmissionService.submit()."""

    @pytest.mark.asyncio
    async def test_submit_screens_immediately(
        self, submission_service: SubmissionService
    ) -> None:
        """A non-draft submission comes back already screened."""
        submission = await submission_service.submit(
            "user-1", "Wisdom", "  On patience  ", "Patience is kind."
        )

        assert submission.status == SubmissionStatus.SCREENING_PASSED
        assert submission.title == "On patience"
        assert submission.owner_id == "user-1"

    @pytest.mark.asyncio
    async def test_draft_skips_screening(
        self,
        submission_service: SubmissionService,
        submission_repo: SubmissionRepositoryStub,
    ) -> None:
        submission = await submission_service.submit(
            "user-1", "poem", "Dawn", "Light returns.", draft=True
        )

        assert submission.status == SubmissionStatus.DRAFT
        assert await submission_repo.list_evaluations(submission.id) == []

    @pytest.mark.asyncio
    async def test_screening_outage_leaves_submitted(
        self,
        submission_service: SubmissionService,
        principle_repo: PrincipleRepositoryStub,
    ) -> None:
        """With no principles the submission is kept for a later rescreen."""
        principle_repo.clear()

        submission = await submission_service.submit("user-1", "wisdom", "t", "x")

        assert submission.status == SubmissionStatus.SUBMITTED

    @pytest.mark.asyncio
    async def test_records_created_event(
        self,
        submission_service: SubmissionService,
        outbox: AuditOutbox,
        audit_sink: AuditSinkStub,
    ) -> None:
        """The creation event is attributed to the human submitter."""
        submission = await submission_service.submit("user-7", "wisdom", "t", "x")
        await outbox.flush()

        created = audit_sink.events[0]
        assert created.event_type == AuditEventType.SUBMISSION_CREATED
        assert created.actor_kind == ActorKind.HUMAN
        assert created.actor_id == "user-7"
        assert created.subject_id == str(submission.id)


class TestGetStatus:
    """Tests for SubmissionService.get_status()."""

    @pytest.mark.asyncio
    async def test_status_view(self, submission_service: SubmissionService) -> None:
        """The view carries the stage and the latest screening."""
        submission = await submission_service.submit("user-1", "wisdom", "t", "x")

        view = await submission_service.get_status(submission.id)

        assert view.submission.id == submission.id
        assert view.refinement_stage == RefinementStage.RAW
        assert view.latest_evaluation is not None
        assert view.latest_evaluation.subject_id == submission.id

    @pytest.mark.asyncio
    async def test_unknown_submission(
        self, submission_service: SubmissionService
    ) -> None:
        with pytest.raises(SubmissionNotFoundError):
            await submission_service.get_status(uuid7())
