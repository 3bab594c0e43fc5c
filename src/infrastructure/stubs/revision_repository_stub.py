"""In-memory revision repository."""

from __future__ import annotations

from uuid import UUID

from src.application.ports.revision_repository import RevisionRepositoryProtocol
from src.domain.errors.revision import RevisionNotFoundError
from src.domain.models.revision_proposal import (
    CooldownRecord,
    CouncilMember,
    DiscussionEntry,
    RevisionProposal,
)

DEFAULT_COUNCIL: tuple[CouncilMember, ...] = (
    CouncilMember(
        id="council-text",
        name="Textual Scholar",
        perspective="Compare the wording closely and judge whether the revision "
        "preserves the original meaning.",
    ),
    CouncilMember(
        id="council-ethics",
        name="Ethicist",
        perspective="Judge whether the revision changes the moral teaching of the entry.",
    ),
    CouncilMember(
        id="council-reader",
        name="Reader Advocate",
        perspective="Judge whether readers will find the revised text clearer.",
    ),
)


class RevisionRepositoryStub(RevisionRepositoryProtocol):
    """Dictionary-backed RevisionRepositoryProtocol."""

    def __init__(self, council: tuple[CouncilMember, ...] | list[CouncilMember] = ()) -> None:
        self._proposals: dict[UUID, RevisionProposal] = {}
        self._cooldowns: dict[tuple[str, str], CooldownRecord] = {}
        self._discussion: dict[UUID, list[DiscussionEntry]] = {}
        self._council: list[CouncilMember] = list(council)

    def clear(self) -> None:
        self._proposals.clear()
        self._cooldowns.clear()
        self._discussion.clear()

    def add_council_member(self, member: CouncilMember) -> None:
        self._council.append(member)

    async def save(self, proposal: RevisionProposal) -> None:
        self._proposals[proposal.id] = proposal

    async def get(self, proposal_id: UUID) -> RevisionProposal | None:
        return self._proposals.get(proposal_id)

    async def update(self, proposal: RevisionProposal) -> None:
        if proposal.id not in self._proposals:
            raise RevisionNotFoundError(proposal.id)
        self._proposals[proposal.id] = proposal

    async def get_cooldown(self, entry_id: str, proposer_id: str) -> CooldownRecord | None:
        return self._cooldowns.get((entry_id, proposer_id))

    async def upsert_cooldown(self, record: CooldownRecord) -> None:
        self._cooldowns[(record.entry_id, record.proposer_id)] = record

    async def add_discussion_entry(self, entry: DiscussionEntry) -> None:
        self._discussion.setdefault(entry.proposal_id, []).append(entry)

    async def list_discussion(self, proposal_id: UUID) -> list[DiscussionEntry]:
        return list(self._discussion.get(proposal_id, []))

    async def list_active_council_members(self) -> list[CouncilMember]:
        return [member for member in self._council if member.is_active]
