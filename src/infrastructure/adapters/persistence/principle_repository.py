"""PostgreSQL principle repository."""

from __future__ import annotations

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.domain.models.compliance import Principle


class PostgresPrincipleRepository:
    """Reads the weighted principle set from the principles table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def list_active(self) -> list[Principle]:
        async with self._session_factory() as session:
            result = await session.execute(
                text("""
                    SELECT id, name, description, weight, priority, is_active
                    FROM principles
                    WHERE is_active
                    ORDER BY priority ASC, id ASC
                """)
            )
            return [
                Principle(
                    id=row["id"],
                    name=row["name"],
                    description=row["description"],
                    weight=row["weight"],
                    priority=row["priority"],
                    is_active=row["is_active"],
                )
                for row in result.mappings()
            ]

    async def upsert(self, principle: Principle) -> None:
        """Create or replace a principle; used for seeding."""
        async with self._session_factory() as session, session.begin():
            await session.execute(
                text("""
                    INSERT INTO principles
                        (id, name, description, weight, priority, is_active)
                    VALUES
                        (:id, :name, :description, :weight, :priority, :is_active)
                    ON CONFLICT (id) DO UPDATE SET
                        name = EXCLUDED.name,
                        description = EXCLUDED.description,
                        weight = EXCLUDED.weight,
                        priority = EXCLUDED.priority,
                        is_active = EXCLUDED.is_active
                """),
                {
                    "id": principle.id,
                    "name": principle.name,
                    "description": principle.description,
                    "weight": principle.weight,
                    "priority": principle.priority,
                    "is_active": principle.is_active,
                },
            )
