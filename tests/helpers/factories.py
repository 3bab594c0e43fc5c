"""make_x() factories for domain objects used across the test suite."""

from __future__ import annotations

from datetime import datetime, timedelta
from uuid import UUID

from uuid6 import uuid7

from src.domain.models.compliance import Principle
from src.domain.models.published_entry import EntryOrigin, PublishedEntry
from src.domain.models.submission import Submission, SubmissionStatus, SubmissionType
from src.domain.models.voting_session import (
    SessionStatus,
    SubjectType,
    VoteCounters,
    VotingSession,
)
from tests.helpers.fake_time_authority import DEFAULT_FROZEN_AT


def make_principle(
    principle_id: str = "compassion",
    weight: float = 1.0,
    priority: int = 1,
    is_active: bool = True,
) -> Principle:
    return Principle(
        id=principle_id,
        name=principle_id.replace("_", " ").title(),
        description=f"The text honours {principle_id}.",
        weight=weight,
        priority=priority,
        is_active=is_active,
    )


def make_submission(
    status: SubmissionStatus = SubmissionStatus.SUBMITTED,
    owner_id: str = "user-1",
    submission_type: SubmissionType = SubmissionType.WISDOM,
    title: str = "On patience",
    raw_text: str = "Patience is the quiet root of every kindness.",
    created_at: datetime = DEFAULT_FROZEN_AT,
) -> Submission:
    return Submission(
        id=uuid7(),
        owner_id=owner_id,
        submission_type=submission_type,
        title=title,
        raw_text=raw_text,
        status=status,
        created_at=created_at,
        updated_at=created_at,
    )


def make_session(
    counters: VoteCounters = VoteCounters(),
    eligible_human_count: int = 10,
    approval_threshold: float = 0.60,
    quorum_fraction: float = 0.10,
    status: SessionStatus = SessionStatus.ACTIVE,
    subject_type: SubjectType = SubjectType.NEW_SUBMISSION,
    subject_id: UUID | None = None,
    starts_at: datetime = DEFAULT_FROZEN_AT,
    window: timedelta = timedelta(days=7),
) -> VotingSession:
    return VotingSession(
        id=uuid7(),
        subject_id=subject_id or uuid7(),
        subject_type=subject_type,
        title="Test subject",
        approval_threshold=approval_threshold,
        quorum_fraction=quorum_fraction,
        eligible_human_count=eligible_human_count,
        status=status,
        starts_at=starts_at,
        ends_at=starts_at + window,
        counters=counters,
    )


def make_entry(
    chapter: int = 1,
    verse: int = 1,
    theme: str = "wisdom",
    text_ko: str = "Kindness returns to the one who gives it.",
    version: int = 1,
    created_at: datetime = DEFAULT_FROZEN_AT,
) -> PublishedEntry:
    return PublishedEntry(
        id=f"{chapter}:{verse}",
        chapter=chapter,
        verse=verse,
        theme=theme,
        text_ko=text_ko,
        text_en=text_ko,
        version=version,
        origin=EntryOrigin.FOUNDING,
        created_at=created_at,
        updated_at=created_at,
    )
