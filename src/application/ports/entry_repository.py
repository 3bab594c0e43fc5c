"""Published entry repository port.

Multi-row writes (entry plus version row) are single methods so that an
implementation can run them in one transaction; a version row without its
matching entry write, or the reverse, must never be visible.
"""

from __future__ import annotations

from typing import Protocol

from src.domain.models.published_entry import (
    ChapterSummary,
    EntryVersion,
    PublishedEntry,
)


class EntryRepositoryProtocol(Protocol):
    """Protocol for the versioned published store."""

    async def get(self, entry_id: str) -> PublishedEntry | None:
        ...

    async def exists(self, entry_id: str) -> bool:
        ...

    async def list_chapters(self) -> list[ChapterSummary]:
        """Return chapters with theme, verse count and max verse."""
        ...

    async def insert_with_initial_version(
        self, entry: PublishedEntry, version: EntryVersion
    ) -> None:
        """Insert a new entry and its first version row atomically.

        Raises:
            PlacementCollisionError: If entry.id already exists; nothing
                is written.
        """
        ...

    async def apply_revision(
        self,
        snapshot: EntryVersion,
        updated: PublishedEntry,
        expected_version: int,
    ) -> None:
        """Write the pre-change snapshot and the updated entry atomically.

        Raises:
            EntryNotFoundError: If the entry does not exist.
            StaleEntryVersionError: If the stored version is not
                expected_version; nothing is written.
        """
        ...

    async def list_versions(self, entry_id: str) -> list[EntryVersion]:
        """Return version rows oldest first."""
        ...
