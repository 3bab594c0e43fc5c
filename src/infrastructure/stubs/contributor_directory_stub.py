"""Contributor directory stub with a settable eligible-voter count."""

from src.application.ports.contributor_directory import ContributorDirectoryProtocol


class ContributorDirectoryStub(ContributorDirectoryProtocol):
    def __init__(self, eligible_voters: int = 0) -> None:
        self._eligible_voters = eligible_voters

    def set_eligible_voters(self, count: int) -> None:
        if count < 0:
            raise ValueError("count must be non-negative")
        self._eligible_voters = count

    async def count_eligible_voters(self) -> int:
        return self._eligible_voters
