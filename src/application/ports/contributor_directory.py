"""Contributor directory port.

Supplies the eligible-human count snapshotted into each voting session.
"""

from __future__ import annotations

from typing import Protocol


class ContributorDirectoryProtocol(Protocol):
    """Protocol for contributor statistics."""

    async def count_eligible_voters(self) -> int:
        """Count contributors with at least one accepted contribution."""
        ...
