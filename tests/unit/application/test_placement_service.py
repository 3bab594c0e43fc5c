"""Unit tests for PlacementService.

Key Test Scenarios:
1. Next free verse in the chosen chapter
2. Analysis failure falls back to the largest chapter
3. Forced chapter and position
4. Collision is reported and nothing is written
"""

from __future__ import annotations

import pytest
from uuid6 import uuid7

from src.application.services.audit_outbox import AuditOutbox
from src.application.services.placement_service import (
    INITIAL_PLACEMENT_SUMMARY,
    PlacementService,
    fallback_decision,
)
from src.domain.errors.placement import PlacementCollisionError
from src.domain.errors.submission import (
    InvalidSubmissionError,
    SubmissionNotFoundError,
    SubmissionStateError,
)
from src.domain.models.audit_event import AuditEventType
from src.domain.models.published_entry import (
    ChangeType,
    ChapterSummary,
    EntryOrigin,
    PlacementDecision,
)
from src.domain.models.refinement import RefinementRecord, RefinementStage, RewriteResult
from src.domain.models.submission import Submission, SubmissionStatus
from src.infrastructure.stubs import (
    AuditSinkStub,
    EntryRepositoryStub,
    PlacementAnalyzerStub,
    RefinementRepositoryStub,
    SubmissionRepositoryStub,
)
from tests.helpers import make_entry, make_submission
from tests.helpers.fake_time_authority import DEFAULT_FROZEN_AT


@pytest.fixture
def approved(submission_repo: SubmissionRepositoryStub) -> Submission:
    submission = make_submission(status=SubmissionStatus.APPROVED)
    submission_repo.add_submission(submission)
    return submission


class TestFallbackDecision:
    """Tests for fallback_decision()."""

    def test_no_chapters(self) -> None:
        decision = fallback_decision([])

        assert decision.chapter == 1
        assert decision.theme == "wisdom"
        assert decision.used_fallback is True

    def test_largest_chapter_first_on_tie(self) -> None:
        chapters = [
            ChapterSummary(chapter=1, theme="wisdom", verse_count=2, max_verse=2),
            ChapterSummary(chapter=2, theme="love", verse_count=5, max_verse=5),
            ChapterSummary(chapter=3, theme="peace", verse_count=5, max_verse=6),
        ]

        decision = fallback_decision(chapters)

        assert decision.chapter == 2
        assert decision.theme == "love"


class TestPlace:
    """Tests for PlacementService.place()."""

    @pytest.mark.asyncio
    async def test_places_after_last_verse(
        self,
        placement_service: PlacementService,
        entry_repo: EntryRepositoryStub,
        submission_repo: SubmissionRepositoryStub,
        approved: Submission,
    ) -> None:
        entry_repo.add_entry(make_entry(chapter=1, verse=1))
        entry_repo.add_entry(make_entry(chapter=1, verse=3))

        entry = await placement_service.place(approved.id)

        assert entry.id == "1:4"
        assert entry.version == 1
        assert entry.origin == EntryOrigin.USER_SUBMISSION
        assert entry.source_submission_id == approved.id
        versions = await entry_repo.list_versions("1:4")
        assert len(versions) == 1
        assert versions[0].change_type == ChangeType.FOUNDING
        assert versions[0].change_summary == INITIAL_PLACEMENT_SUMMARY
        stored = await submission_repo.get(approved.id)
        assert stored is not None
        assert stored.status == SubmissionStatus.REGISTERED
        assert stored.related_entry_id == "1:4"

    @pytest.mark.asyncio
    async def test_new_chapter_starts_at_verse_one(
        self,
        placement_service: PlacementService,
        placement_analyzer: PlacementAnalyzerStub,
        approved: Submission,
    ) -> None:
        placement_analyzer.set_decision(
            PlacementDecision(chapter=4, theme="courage", reasoning="new theme")
        )

        entry = await placement_service.place(approved.id)

        assert entry.id == "4:1"
        assert entry.theme == "courage"

    @pytest.mark.asyncio
    async def test_uses_latest_refinement(
        self,
        placement_service: PlacementService,
        refinement_repo: RefinementRepositoryStub,
        approved: Submission,
    ) -> None:
        await refinement_repo.append(
            RefinementRecord.create(
                submission_id=approved.id,
                stage=RefinementStage.DRAFT,
                rewrite=RewriteResult("refined ko", "refined en", "tidied"),
                similarity=0.9,
                similarity_warning=False,
                prompt_hash="abc",
                model="stub-writer",
                created_at=DEFAULT_FROZEN_AT,
            )
        )

        entry = await placement_service.place(approved.id)

        assert entry.text_ko == "refined ko"
        assert entry.text_en == "refined en"

    @pytest.mark.asyncio
    async def test_raw_text_without_refinement(
        self, placement_service: PlacementService, approved: Submission
    ) -> None:
        entry = await placement_service.place(approved.id)

        assert entry.text_ko == approved.raw_text
        assert entry.text_en == ""

    @pytest.mark.asyncio
    async def test_analysis_failure_uses_largest_chapter(
        self,
        placement_service: PlacementService,
        placement_analyzer: PlacementAnalyzerStub,
        entry_repo: EntryRepositoryStub,
        outbox: AuditOutbox,
        audit_sink: AuditSinkStub,
        approved: Submission,
    ) -> None:
        placement_analyzer.fail()
        entry_repo.add_entry(make_entry(chapter=1, verse=1))
        entry_repo.add_entry(make_entry(chapter=2, verse=1, theme="love"))
        entry_repo.add_entry(make_entry(chapter=2, verse=2, theme="love"))

        entry = await placement_service.place(approved.id)
        await outbox.flush()

        assert entry.id == "2:3"
        event = audit_sink.events[-1]
        assert event.event_type == AuditEventType.CONTENT_PLACED
        assert event.details["used_fallback"] is True

    @pytest.mark.asyncio
    async def test_forced_chapter_and_position(
        self,
        placement_service: PlacementService,
        placement_analyzer: PlacementAnalyzerStub,
        approved: Submission,
    ) -> None:
        """A forced chapter skips the analysis service."""
        placement_analyzer.fail()

        entry = await placement_service.place(
            approved.id, force_chapter=7, force_position=12
        )

        assert entry.id == "7:12"

    @pytest.mark.asyncio
    async def test_collision_writes_nothing(
        self,
        placement_service: PlacementService,
        entry_repo: EntryRepositoryStub,
        submission_repo: SubmissionRepositoryStub,
        approved: Submission,
    ) -> None:
        """Placing at an occupied 3:5 fails and leaves every row untouched."""
        occupant = make_entry(chapter=3, verse=5)
        entry_repo.add_entry(occupant)

        with pytest.raises(PlacementCollisionError) as exc_info:
            await placement_service.place(approved.id, force_chapter=3, force_position=5)

        assert exc_info.value.entry_id == "3:5"
        assert await entry_repo.get("3:5") == occupant
        assert await entry_repo.list_versions("3:5") == []
        stored = await submission_repo.get(approved.id)
        assert stored is not None
        assert stored.status == SubmissionStatus.APPROVED

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("chapter", "position"), [(0, None), (None, 0), (-1, 3)]
    )
    async def test_forced_values_below_one(
        self,
        placement_service: PlacementService,
        approved: Submission,
        chapter: int | None,
        position: int | None,
    ) -> None:
        with pytest.raises(InvalidSubmissionError):
            await placement_service.place(
                approved.id, force_chapter=chapter, force_position=position
            )

    @pytest.mark.asyncio
    async def test_requires_approval(
        self,
        placement_service: PlacementService,
        submission_repo: SubmissionRepositoryStub,
    ) -> None:
        submission = make_submission(status=SubmissionStatus.VOTING)
        submission_repo.add_submission(submission)

        with pytest.raises(SubmissionStateError):
            await placement_service.place(submission.id)

    @pytest.mark.asyncio
    async def test_unknown_submission(self, placement_service: PlacementService) -> None:
        with pytest.raises(SubmissionNotFoundError):
            await placement_service.place(uuid7())
