"""PostgreSQL refinement ledger. Insert-only."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.domain.errors.refinement import InvalidStageTransitionError
from src.domain.models.refinement import RefinementRecord, RefinementStage

_COLUMNS = """
    id, submission_id, stage, text_ko, text_en, similarity_to_previous,
    change_summary, similarity_warning, prompt_hash, model, created_at
"""


def _row_to_record(row: Mapping[str, Any]) -> RefinementRecord:
    return RefinementRecord(
        id=UUID(str(row["id"])),
        submission_id=UUID(str(row["submission_id"])),
        stage=RefinementStage(row["stage"]),
        text_ko=row["text_ko"],
        text_en=row["text_en"],
        similarity_to_previous=row["similarity_to_previous"],
        change_summary=row["change_summary"],
        similarity_warning=row["similarity_warning"],
        prompt_hash=row["prompt_hash"],
        model=row["model"],
        created_at=row["created_at"],
    )


class PostgresRefinementRepository:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def append(self, record: RefinementRecord) -> None:
        latest = await self.latest(record.submission_id)
        current = latest.stage if latest else RefinementStage.RAW
        try:
            async with self._session_factory() as session, session.begin():
                await session.execute(
                    text(f"""
                        INSERT INTO refinement_records ({_COLUMNS}, stage_ordinal)
                        VALUES (
                            :id, :submission_id, :stage, :text_ko, :text_en,
                            :similarity_to_previous, :change_summary,
                            :similarity_warning, :prompt_hash, :model, :created_at,
                            :stage_ordinal
                        )
                    """),
                    {
                        "id": record.id,
                        "submission_id": record.submission_id,
                        "stage": record.stage.value,
                        "stage_ordinal": record.stage.ordinal,
                        "text_ko": record.text_ko,
                        "text_en": record.text_en,
                        "similarity_to_previous": record.similarity_to_previous,
                        "change_summary": record.change_summary,
                        "similarity_warning": record.similarity_warning,
                        "prompt_hash": record.prompt_hash,
                        "model": record.model,
                        "created_at": record.created_at,
                    },
                )
        except IntegrityError as e:
            raise InvalidStageTransitionError(
                record.submission_id, current, record.stage, current.successor()
            ) from e

    async def latest(self, submission_id: UUID) -> RefinementRecord | None:
        async with self._session_factory() as session:
            result = await session.execute(
                text(f"""
                    SELECT {_COLUMNS}
                    FROM refinement_records
                    WHERE submission_id = :submission_id
                    ORDER BY stage_ordinal DESC
                    LIMIT 1
                """),
                {"submission_id": submission_id},
            )
            row = result.mappings().first()
            return _row_to_record(row) if row else None

    async def history(self, submission_id: UUID) -> list[RefinementRecord]:
        async with self._session_factory() as session:
            result = await session.execute(
                text(f"""
                    SELECT {_COLUMNS}
                    FROM refinement_records
                    WHERE submission_id = :submission_id
                    ORDER BY stage_ordinal ASC
                """),
                {"submission_id": submission_id},
            )
            return [_row_to_record(row) for row in result.mappings()]
