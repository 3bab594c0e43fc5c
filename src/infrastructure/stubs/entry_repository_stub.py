"""In-memory published entry repository with version history."""

from __future__ import annotations

import asyncio

from src.application.ports.entry_repository import EntryRepositoryProtocol
from src.domain.errors.placement import (
    EntryNotFoundError,
    PlacementCollisionError,
    StaleEntryVersionError,
)
from src.domain.models.published_entry import (
    ChapterSummary,
    EntryVersion,
    PublishedEntry,
)


class EntryRepositoryStub(EntryRepositoryProtocol):
    """Entries and version rows, written together under one lock."""

    def __init__(self) -> None:
        self._entries: dict[str, PublishedEntry] = {}
        self._versions: dict[str, list[EntryVersion]] = {}
        self._lock = asyncio.Lock()

    def clear(self) -> None:
        self._entries.clear()
        self._versions.clear()

    def add_entry(self, entry: PublishedEntry) -> None:
        """Seed an entry without a version row (e.g. founding text)."""
        self._entries[entry.id] = entry

    async def get(self, entry_id: str) -> PublishedEntry | None:
        return self._entries.get(entry_id)

    async def exists(self, entry_id: str) -> bool:
        return entry_id in self._entries

    async def list_chapters(self) -> list[ChapterSummary]:
        chapters: dict[int, list[PublishedEntry]] = {}
        for entry in self._entries.values():
            chapters.setdefault(entry.chapter, []).append(entry)
        return [
            ChapterSummary(
                chapter=number,
                theme=min(entries, key=lambda e: e.verse).theme,
                verse_count=len(entries),
                max_verse=max(e.verse for e in entries),
            )
            for number, entries in sorted(chapters.items())
        ]

    async def insert_with_initial_version(
        self, entry: PublishedEntry, version: EntryVersion
    ) -> None:
        async with self._lock:
            if entry.id in self._entries:
                raise PlacementCollisionError(entry.id)
            self._entries[entry.id] = entry
            self._versions.setdefault(entry.id, []).append(version)

    async def apply_revision(
        self,
        snapshot: EntryVersion,
        updated: PublishedEntry,
        expected_version: int,
    ) -> None:
        async with self._lock:
            stored = self._entries.get(updated.id)
            if stored is None:
                raise EntryNotFoundError(updated.id)
            if stored.version != expected_version:
                raise StaleEntryVersionError(updated.id, expected_version, stored.version)
            self._versions.setdefault(updated.id, []).append(snapshot)
            self._entries[updated.id] = updated

    async def list_versions(self, entry_id: str) -> list[EntryVersion]:
        return list(self._versions.get(entry_id, []))
