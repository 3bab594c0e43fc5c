"""Placement and versioning errors."""

from __future__ import annotations

from src.domain.exceptions import GovernanceError


class PlacementError(GovernanceError):
    """Base class for placement-related errors."""

    pass


class EntryNotFoundError(PlacementError):
    """Raised when a published entry does not exist."""

    def __init__(self, entry_id: str) -> None:
        self.entry_id = entry_id
        super().__init__(f"Published entry not found: {entry_id}")


class PlacementCollisionError(PlacementError):
    """Raised when the allocated identifier is already taken.

    Collisions are never auto-resolved; nothing is written.

    Attributes:
        entry_id: The colliding "{chapter}:{verse}" identifier.
    """

    def __init__(self, entry_id: str) -> None:
        self.entry_id = entry_id
        super().__init__(f"Entry id {entry_id} already exists")


class StaleEntryVersionError(PlacementError):
    """Raised when an in-place update races another update.

    Attributes:
        entry_id: The entry.
        expected_version: Version the writer read.
        actual_version: Version found at write time.
    """

    def __init__(self, entry_id: str, expected_version: int, actual_version: int) -> None:
        self.entry_id = entry_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Entry {entry_id} is at version {actual_version}, "
            f"expected {expected_version}"
        )
