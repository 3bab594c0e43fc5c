"""PostgreSQL contributor directory.

An eligible voter is an owner with at least one registered submission.
"""

from __future__ import annotations

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker


class PostgresContributorDirectory:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def count_eligible_voters(self) -> int:
        async with self._session_factory() as session:
            result = await session.execute(
                text("""
                    SELECT COUNT(DISTINCT owner_id)
                    FROM submissions
                    WHERE status = 'registered'
                """)
            )
            return int(result.scalar() or 0)
