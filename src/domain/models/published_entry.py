"""Published entry and version history models.

Entries are addressed by "{chapter}:{verse}". Every in-place change is
preceded by an EntryVersion row holding the pre-change text, so the
version history is append-only and complete.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from uuid import UUID

from uuid6 import uuid7

# Theme used when a chapter is created with no better information
DEFAULT_THEME = "wisdom"


class EntryOrigin(Enum):
    FOUNDING = "founding"
    USER_SUBMISSION = "user_submission"


class ChangeType(Enum):
    """Why a version row was written."""

    FOUNDING = "founding"
    COMMUNITY_REVISION = "community_revision"


def make_entry_id(chapter: int, verse: int) -> str:
    """Build the composite "{chapter}:{verse}" identifier.

    Raises:
        ValueError: If chapter or verse is below 1.
    """
    if chapter < 1 or verse < 1:
        raise ValueError(f"chapter and verse must be >= 1, got {chapter}:{verse}")
    return f"{chapter}:{verse}"


@dataclass(frozen=True, eq=True)
class PublishedEntry:
    """A placed entry of the canon.

    Attributes:
        id: "{chapter}:{verse}".
        chapter: Chapter number (>= 1).
        verse: Verse number within the chapter (>= 1).
        theme: Chapter theme.
        text_ko: Korean text.
        text_en: English text.
        version: Current version number, starting at 1.
        origin: How the entry came to exist.
        source_submission_id: Submission it was placed from, if any.
        traditions: Traditions the entry resonates with.
        reflection: Short reflection for readers.
        created_at: Placement time.
        updated_at: Last in-place update.
    """

    id: str
    chapter: int
    verse: int
    theme: str
    text_ko: str
    text_en: str
    version: int
    origin: EntryOrigin
    created_at: datetime
    updated_at: datetime
    source_submission_id: UUID | None = None
    traditions: tuple[str, ...] = ()
    reflection: str = ""

    def with_revision(
        self, text_ko: str, text_en: str, updated_at: datetime
    ) -> PublishedEntry:
        """Return the entry with new text and the next version number."""
        return replace(
            self,
            text_ko=text_ko,
            text_en=text_en,
            version=self.version + 1,
            updated_at=updated_at,
        )


@dataclass(frozen=True, eq=True)
class EntryVersion:
    """Append-only snapshot of an entry's text at one version.

    Attributes:
        id: UUIDv7 identifier.
        entry_id: The entry.
        version: Version number the snapshot holds.
        text_ko: Korean text at that version.
        text_en: English text at that version.
        change_type: founding or community_revision.
        change_summary: Why the change happened.
        changed_by: Actor responsible.
        voting_session_id: Session that approved the change, if any.
        created_at: When the snapshot was written.
    """

    id: UUID
    entry_id: str
    version: int
    text_ko: str
    text_en: str
    change_type: ChangeType
    change_summary: str
    changed_by: str
    created_at: datetime
    voting_session_id: UUID | None = None

    @classmethod
    def snapshot(
        cls,
        entry: PublishedEntry,
        change_type: ChangeType,
        change_summary: str,
        changed_by: str,
        created_at: datetime,
        voting_session_id: UUID | None = None,
    ) -> EntryVersion:
        """Snapshot the entry's current text and version."""
        return cls(
            id=uuid7(),
            entry_id=entry.id,
            version=entry.version,
            text_ko=entry.text_ko,
            text_en=entry.text_en,
            change_type=change_type,
            change_summary=change_summary,
            changed_by=changed_by,
            created_at=created_at,
            voting_session_id=voting_session_id,
        )


@dataclass(frozen=True, eq=True)
class ChapterSummary:
    """A chapter as seen by placement analysis."""

    chapter: int
    theme: str
    verse_count: int
    max_verse: int


@dataclass(frozen=True, eq=True)
class PlacementDecision:
    """Where an approved submission should go.

    Attributes:
        chapter: Chosen chapter (existing or new, >= 1).
        theme: Chapter theme.
        reasoning: Why this chapter was chosen.
        traditions: Traditions the text resonates with.
        reflection: Short reader reflection.
        used_fallback: True when the analysis service failed.
        manual: True when the chapter was forced by the caller.
    """

    chapter: int
    theme: str
    reasoning: str
    traditions: tuple[str, ...] = field(default_factory=tuple)
    reflection: str = ""
    used_fallback: bool = False
    manual: bool = False

    def __post_init__(self) -> None:
        if self.chapter < 1:
            raise ValueError(f"chapter must be >= 1, got {self.chapter}")
