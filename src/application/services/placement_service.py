"""Placement of approved submissions into the canon.

Chooses a chapter (analysis service, or a caller override), allocates the
next verse and inserts the entry together with its first version row.
Identifier collisions are reported, never resolved automatically.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from uuid import UUID

from src.application.ports.entry_repository import EntryRepositoryProtocol
from src.application.ports.placement_analyzer import PlacementAnalyzerProtocol
from src.application.ports.refinement_repository import RefinementRepositoryProtocol
from src.application.ports.submission_repository import SubmissionRepositoryProtocol
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.services.audit_outbox import AuditOutbox
from src.application.services.base import LoggingMixin
from src.application.services.compliance_scorer import DEFAULT_CALL_TIMEOUT_SECONDS
from src.domain.errors.placement import PlacementCollisionError
from src.domain.errors.submission import (
    InvalidSubmissionError,
    SubmissionNotFoundError,
    SubmissionStateError,
)
from src.domain.models.audit_event import ActorKind, AuditEventType
from src.domain.models.published_entry import (
    DEFAULT_THEME,
    ChangeType,
    ChapterSummary,
    EntryOrigin,
    EntryVersion,
    PlacementDecision,
    PublishedEntry,
    make_entry_id,
)
from src.domain.models.submission import SubmissionStatus

INITIAL_PLACEMENT_SUMMARY = "Initial placement via community approval"


def fallback_decision(chapters: Sequence[ChapterSummary]) -> PlacementDecision:
    """Largest chapter by verse count, or chapter 1 when there are none.

    Ties keep the first chapter in the given order.
    """
    if not chapters:
        return PlacementDecision(
            chapter=1,
            theme=DEFAULT_THEME,
            reasoning="No chapters exist; starting chapter 1.",
            used_fallback=True,
        )
    largest = chapters[0]
    for chapter in chapters[1:]:
        if chapter.verse_count > largest.verse_count:
            largest = chapter
    return PlacementDecision(
        chapter=largest.chapter,
        theme=largest.theme,
        reasoning="Placement analysis unavailable; using the largest chapter.",
        used_fallback=True,
    )


class PlacementService(LoggingMixin):
    """Places approved submissions as published entries."""

    def __init__(
        self,
        submissions: SubmissionRepositoryProtocol,
        refinements: RefinementRepositoryProtocol,
        entries: EntryRepositoryProtocol,
        analyzer: PlacementAnalyzerProtocol,
        audit: AuditOutbox,
        time_authority: TimeAuthorityProtocol,
        call_timeout_seconds: float = DEFAULT_CALL_TIMEOUT_SECONDS,
    ) -> None:
        self._submissions = submissions
        self._refinements = refinements
        self._entries = entries
        self._analyzer = analyzer
        self._audit = audit
        self._time = time_authority
        self._call_timeout_seconds = call_timeout_seconds
        self._init_logger(component="placement")

    async def place(
        self,
        submission_id: UUID,
        force_chapter: int | None = None,
        force_position: int | None = None,
    ) -> PublishedEntry:
        """Place an approved submission.

        Args:
            submission_id: The approved submission.
            force_chapter: Skip analysis and use this chapter.
            force_position: Use this verse number instead of the next free one.

        Returns:
            The inserted PublishedEntry at version 1.

        Raises:
            SubmissionNotFoundError: Unknown submission.
            SubmissionStateError: Submission is not approved.
            InvalidSubmissionError: A forced chapter or position is below 1.
            PlacementCollisionError: The identifier is taken; nothing written.
        """
        log = self._log_operation("place", submission_id=str(submission_id))

        submission = await self._submissions.get(submission_id)
        if submission is None:
            raise SubmissionNotFoundError(submission_id)
        if submission.status != SubmissionStatus.APPROVED:
            raise SubmissionStateError(
                submission_id,
                submission.status,
                (SubmissionStatus.APPROVED,),
                operation="place",
            )
        if force_chapter is not None and force_chapter < 1:
            raise InvalidSubmissionError("force_chapter", "must be >= 1")
        if force_position is not None and force_position < 1:
            raise InvalidSubmissionError("force_position", "must be >= 1")

        latest = await self._refinements.latest(submission_id)
        if latest is not None:
            text_ko, text_en = latest.text_ko, latest.text_en
        else:
            log.warning("placement_using_raw_text")
            text_ko, text_en = submission.raw_text, ""

        chapters = await self._entries.list_chapters()
        if force_chapter is not None:
            decision = self._manual_decision(force_chapter, chapters)
        else:
            decision = await self._analyze(text_ko, chapters)

        existing = next((c for c in chapters if c.chapter == decision.chapter), None)
        if force_position is not None:
            verse = force_position
        else:
            verse = existing.max_verse + 1 if existing is not None else 1
        entry_id = make_entry_id(decision.chapter, verse)

        if await self._entries.exists(entry_id):
            log.error("placement_collision", entry_id=entry_id)
            raise PlacementCollisionError(entry_id)

        now = self._time.now()
        entry = PublishedEntry(
            id=entry_id,
            chapter=decision.chapter,
            verse=verse,
            theme=existing.theme if existing is not None else decision.theme,
            text_ko=text_ko,
            text_en=text_en,
            version=1,
            origin=EntryOrigin.USER_SUBMISSION,
            created_at=now,
            updated_at=now,
            source_submission_id=submission_id,
            traditions=decision.traditions,
            reflection=decision.reflection,
        )
        version = EntryVersion.snapshot(
            entry,
            change_type=ChangeType.FOUNDING,
            change_summary=INITIAL_PLACEMENT_SUMMARY,
            changed_by=submission.owner_id,
            created_at=now,
        )
        await self._entries.insert_with_initial_version(entry, version)
        await self._submissions.update(
            submission.with_status(
                SubmissionStatus.REGISTERED, now, related_entry_id=entry_id
            )
        )

        self._audit.record(
            AuditEventType.CONTENT_PLACED,
            ActorKind.SYSTEM,
            subject_type="entry",
            subject_id=entry_id,
            details={
                "submission_id": str(submission_id),
                "chapter": decision.chapter,
                "verse": verse,
                "used_fallback": decision.used_fallback,
                "manual": decision.manual,
            },
        )
        log.info(
            "content_placed",
            entry_id=entry_id,
            used_fallback=decision.used_fallback,
            manual=decision.manual,
        )
        return entry

    async def _analyze(
        self, text: str, chapters: Sequence[ChapterSummary]
    ) -> PlacementDecision:
        try:
            return await asyncio.wait_for(
                self._analyzer.analyze(text, chapters),
                timeout=self._call_timeout_seconds,
            )
        except Exception as exc:
            self._log.warning(
                "placement_analysis_failed", error=str(exc) or type(exc).__name__
            )
            return fallback_decision(chapters)

    def _manual_decision(
        self, chapter: int, chapters: Sequence[ChapterSummary]
    ) -> PlacementDecision:
        existing = next((c for c in chapters if c.chapter == chapter), None)
        return PlacementDecision(
            chapter=chapter,
            theme=existing.theme if existing is not None else DEFAULT_THEME,
            reasoning="Chapter chosen by the caller.",
            manual=True,
        )
