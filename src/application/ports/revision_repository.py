"""Revision repository port.

Stores proposals, discussion entries, council members and the per
(entry, proposer) cooldown records.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from src.domain.models.revision_proposal import (
    CooldownRecord,
    CouncilMember,
    DiscussionEntry,
    RevisionProposal,
)


class RevisionRepositoryProtocol(Protocol):
    """Protocol for revision workflow storage."""

    async def save(self, proposal: RevisionProposal) -> None:
        ...

    async def get(self, proposal_id: UUID) -> RevisionProposal | None:
        ...

    async def update(self, proposal: RevisionProposal) -> None:
        """Replace a stored proposal.

        Raises:
            RevisionNotFoundError: If the proposal does not exist.
        """
        ...

    async def get_cooldown(self, entry_id: str, proposer_id: str) -> CooldownRecord | None:
        """Return the cooldown record for the pair, expired or not."""
        ...

    async def upsert_cooldown(self, record: CooldownRecord) -> None:
        """Create or replace the cooldown record for the pair."""
        ...

    async def add_discussion_entry(self, entry: DiscussionEntry) -> None:
        ...

    async def list_discussion(self, proposal_id: UUID) -> list[DiscussionEntry]:
        """Return discussion entries oldest first."""
        ...

    async def list_active_council_members(self) -> list[CouncilMember]:
        ...
