"""PostgreSQL published entry repository.

Entry writes and their version rows share one transaction. In-place
revisions lock the entry row and check the version before writing.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.domain.errors.placement import (
    EntryNotFoundError,
    PlacementCollisionError,
    StaleEntryVersionError,
)
from src.domain.models.published_entry import (
    ChangeType,
    ChapterSummary,
    EntryOrigin,
    EntryVersion,
    PublishedEntry,
)
from src.infrastructure.adapters.persistence.json_columns import dump_json, load_json

_ENTRY_COLUMNS = """
    id, chapter, verse, theme, text_ko, text_en, version, origin,
    source_submission_id, traditions, reflection, created_at, updated_at
"""

_INSERT_VERSION = text("""
    INSERT INTO entry_versions (
        id, entry_id, version, text_ko, text_en, change_type, change_summary,
        changed_by, voting_session_id, created_at
    ) VALUES (
        :id, :entry_id, :version, :text_ko, :text_en, :change_type,
        :change_summary, :changed_by, :voting_session_id, :created_at
    )
""")


def _row_to_entry(row: Mapping[str, Any]) -> PublishedEntry:
    source = row["source_submission_id"]
    return PublishedEntry(
        id=row["id"],
        chapter=row["chapter"],
        verse=row["verse"],
        theme=row["theme"],
        text_ko=row["text_ko"],
        text_en=row["text_en"],
        version=row["version"],
        origin=EntryOrigin(row["origin"]),
        source_submission_id=UUID(str(source)) if source else None,
        traditions=tuple(load_json(row["traditions"]) or ()),
        reflection=row["reflection"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_version(row: Mapping[str, Any]) -> EntryVersion:
    session_id = row["voting_session_id"]
    return EntryVersion(
        id=UUID(str(row["id"])),
        entry_id=row["entry_id"],
        version=row["version"],
        text_ko=row["text_ko"],
        text_en=row["text_en"],
        change_type=ChangeType(row["change_type"]),
        change_summary=row["change_summary"],
        changed_by=row["changed_by"],
        voting_session_id=UUID(str(session_id)) if session_id else None,
        created_at=row["created_at"],
    )


def _version_params(version: EntryVersion) -> dict[str, Any]:
    return {
        "id": version.id,
        "entry_id": version.entry_id,
        "version": version.version,
        "text_ko": version.text_ko,
        "text_en": version.text_en,
        "change_type": version.change_type.value,
        "change_summary": version.change_summary,
        "changed_by": version.changed_by,
        "voting_session_id": version.voting_session_id,
        "created_at": version.created_at,
    }


class PostgresEntryRepository:
    """EntryRepositoryProtocol over published_entries and entry_versions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self, entry_id: str) -> PublishedEntry | None:
        async with self._session_factory() as session:
            result = await session.execute(
                text(f"SELECT {_ENTRY_COLUMNS} FROM published_entries WHERE id = :id"),
                {"id": entry_id},
            )
            row = result.mappings().first()
            return _row_to_entry(row) if row else None

    async def exists(self, entry_id: str) -> bool:
        async with self._session_factory() as session:
            result = await session.execute(
                text("SELECT 1 FROM published_entries WHERE id = :id"),
                {"id": entry_id},
            )
            return result.first() is not None

    async def list_chapters(self) -> list[ChapterSummary]:
        async with self._session_factory() as session:
            result = await session.execute(
                text("""
                    SELECT chapter,
                           (ARRAY_AGG(theme ORDER BY verse ASC))[1] AS theme,
                           COUNT(*) AS verse_count,
                           MAX(verse) AS max_verse
                    FROM published_entries
                    GROUP BY chapter
                    ORDER BY chapter ASC
                """)
            )
            return [
                ChapterSummary(
                    chapter=row["chapter"],
                    theme=row["theme"],
                    verse_count=int(row["verse_count"]),
                    max_verse=row["max_verse"],
                )
                for row in result.mappings()
            ]

    async def insert_with_initial_version(
        self, entry: PublishedEntry, version: EntryVersion
    ) -> None:
        try:
            async with self._session_factory() as session, session.begin():
                await session.execute(
                    text(f"""
                        INSERT INTO published_entries ({_ENTRY_COLUMNS})
                        VALUES (
                            :id, :chapter, :verse, :theme, :text_ko, :text_en,
                            :version, :origin, :source_submission_id,
                            CAST(:traditions AS JSONB), :reflection,
                            :created_at, :updated_at
                        )
                    """),
                    {
                        "id": entry.id,
                        "chapter": entry.chapter,
                        "verse": entry.verse,
                        "theme": entry.theme,
                        "text_ko": entry.text_ko,
                        "text_en": entry.text_en,
                        "version": entry.version,
                        "origin": entry.origin.value,
                        "source_submission_id": entry.source_submission_id,
                        "traditions": dump_json(list(entry.traditions)),
                        "reflection": entry.reflection,
                        "created_at": entry.created_at,
                        "updated_at": entry.updated_at,
                    },
                )
                await session.execute(_INSERT_VERSION, _version_params(version))
        except IntegrityError as e:
            raise PlacementCollisionError(entry.id) from e

    async def apply_revision(
        self,
        snapshot: EntryVersion,
        updated: PublishedEntry,
        expected_version: int,
    ) -> None:
        async with self._session_factory() as session, session.begin():
            result = await session.execute(
                text("SELECT version FROM published_entries WHERE id = :id FOR UPDATE"),
                {"id": updated.id},
            )
            row = result.first()
            if row is None:
                raise EntryNotFoundError(updated.id)
            if row[0] != expected_version:
                raise StaleEntryVersionError(updated.id, expected_version, row[0])
            await session.execute(_INSERT_VERSION, _version_params(snapshot))
            await session.execute(
                text("""
                    UPDATE published_entries SET
                        text_ko = :text_ko,
                        text_en = :text_en,
                        version = :version,
                        updated_at = :updated_at
                    WHERE id = :id
                """),
                {
                    "id": updated.id,
                    "text_ko": updated.text_ko,
                    "text_en": updated.text_en,
                    "version": updated.version,
                    "updated_at": updated.updated_at,
                },
            )

    async def list_versions(self, entry_id: str) -> list[EntryVersion]:
        async with self._session_factory() as session:
            result = await session.execute(
                text("""
                    SELECT id, entry_id, version, text_ko, text_en, change_type,
                           change_summary, changed_by, voting_session_id, created_at
                    FROM entry_versions
                    WHERE entry_id = :entry_id
                    ORDER BY created_at ASC, id ASC
                """),
                {"entry_id": entry_id},
            )
            return [_row_to_version(row) for row in result.mappings()]
