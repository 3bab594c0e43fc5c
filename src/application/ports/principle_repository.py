"""Principle repository port."""

from __future__ import annotations

from typing import Protocol

from src.domain.models.compliance import Principle


class PrincipleRepositoryProtocol(Protocol):
    """Protocol for reading the weighted principle set."""

    async def list_active(self) -> list[Principle]:
        """Return active principles ordered by priority (ascending)."""
        ...
