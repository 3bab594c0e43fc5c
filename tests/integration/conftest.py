"""
Integration test configuration with testcontainers.

This module provides a session-scoped PostgreSQL 16 container with the
governance schema applied, and a per-test session factory for the
PostgreSQL repositories.

Container Reuse Pattern:
- The container is started once per test session (scope="session")
- The schema is applied once; tables are truncated after every test
- The container is cleaned up after all tests complete

Usage:
    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_example(session_factory) -> None:
        repo = PostgresSubmissionRepository(session_factory)
        ...

Note: Docker must be running; tests are skipped when it is not.
"""

from collections.abc import AsyncGenerator, Generator
from pathlib import Path

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from testcontainers.postgres import PostgresContainer

from tests.integration.sql_helpers import apply_migrations

MIGRATIONS_DIR = Path(__file__).resolve().parents[2] / "migrations"

GOVERNANCE_TABLES = (
    "audit_events",
    "discussion_entries",
    "revision_cooldowns",
    "revision_proposals",
    "council_members",
    "entry_versions",
    "published_entries",
    "automated_voters",
    "votes",
    "voting_sessions",
    "refinement_records",
    "compliance_evaluations",
    "submissions",
    "principles",
)


@pytest.fixture(scope="session")
def postgres_container() -> Generator[PostgresContainer, None, None]:
    """Session-scoped PostgreSQL 16 container.

    Skips the requesting tests when no Docker daemon is reachable.
    """
    container = PostgresContainer("postgres:16-alpine")
    try:
        container.start()
    except Exception as exc:  # docker client raises several unrelated types
        pytest.skip(f"PostgreSQL container unavailable: {exc}")
    try:
        yield container
    finally:
        container.stop()


@pytest.fixture(scope="session")
def postgres_async_url(postgres_container: PostgresContainer) -> str:
    """Get async-compatible PostgreSQL connection URL.

    testcontainers returns a psycopg2 URL by default; convert to asyncpg.
    """
    sync_url = postgres_container.get_connection_url()
    async_url: str = sync_url.replace(
        "postgresql+psycopg2://", "postgresql+asyncpg://"
    ).replace("postgresql://", "postgresql+asyncpg://")
    return async_url


@pytest.fixture
async def session_factory(
    postgres_async_url: str,
) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Per-test session factory over a migrated, empty schema.

    Repositories commit their own transactions, so isolation comes from
    truncating every governance table after the test.
    """
    engine = create_async_engine(postgres_async_url, echo=False)
    factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with factory() as session, session.begin():
        await apply_migrations(session, MIGRATIONS_DIR)

    yield factory

    async with factory() as session, session.begin():
        await session.execute(
            text(f"TRUNCATE {', '.join(GOVERNANCE_TABLES)} CASCADE")
        )
    await engine.dispose()
