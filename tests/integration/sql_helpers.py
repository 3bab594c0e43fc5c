"""Helpers for applying SQL migration files in tests."""

from __future__ import annotations

from pathlib import Path

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession


def split_sql_statements(sql: str) -> list[str]:
    """Split a script on semicolons outside dollar-quoted bodies.

    Function bodies such as ``$$ BEGIN ...; END; $$`` stay in one piece.
    """
    statements: list[str] = []
    buffer: list[str] = []
    open_tag: str | None = None
    i = 0

    while i < len(sql):
        ch = sql[i]
        if ch == "$":
            end = i + 1
            while end < len(sql) and (sql[end].isalnum() or sql[end] == "_"):
                end += 1
            if end < len(sql) and sql[end] == "$":
                tag = sql[i : end + 1]
                if open_tag is None:
                    open_tag = tag
                elif tag == open_tag:
                    open_tag = None
                buffer.append(tag)
                i = end + 1
                continue
        if ch == ";" and open_tag is None:
            statements.append("".join(buffer))
            buffer = []
        else:
            buffer.append(ch)
        i += 1

    statements.append("".join(buffer))
    return [s for s in statements if _has_sql(s)]


def _has_sql(statement: str) -> bool:
    return any(
        line.strip() and not line.strip().startswith("--")
        for line in statement.splitlines()
    )


async def apply_migrations(session: AsyncSession, directory: Path) -> None:
    """Execute every ``*.sql`` file in the directory in name order."""
    for path in sorted(directory.glob("*.sql")):
        for statement in split_sql_statements(path.read_text()):
            await session.execute(text(statement))
