"""In-memory principle repository."""

from __future__ import annotations

from src.application.ports.principle_repository import PrincipleRepositoryProtocol
from src.domain.models.compliance import Principle

# Founding principle set used by the development server
DEFAULT_PRINCIPLES: tuple[Principle, ...] = (
    Principle(
        id="compassion",
        name="Compassion",
        description="The text encourages care for others and reduces suffering.",
        weight=0.25,
        priority=1,
    ),
    Principle(
        id="non_harm",
        name="Non-harm",
        description="The text does not promote violence, hatred or exclusion.",
        weight=0.25,
        priority=2,
    ),
    Principle(
        id="inclusivity",
        name="Inclusivity",
        description="The text respects all traditions and does not claim exclusive truth.",
        weight=0.2,
        priority=3,
    ),
    Principle(
        id="reason",
        name="Reason",
        description="The text does not contradict established evidence.",
        weight=0.15,
        priority=4,
    ),
    Principle(
        id="humility",
        name="Humility",
        description="The text invites reflection rather than demanding obedience.",
        weight=0.15,
        priority=5,
    ),
)


class PrincipleRepositoryStub(PrincipleRepositoryProtocol):
    """Holds a mutable principle list; only active principles are returned."""

    def __init__(self, principles: tuple[Principle, ...] | list[Principle] = ()) -> None:
        self._principles: list[Principle] = list(principles)

    def clear(self) -> None:
        self._principles.clear()

    def add_principle(self, principle: Principle) -> None:
        self._principles.append(principle)

    async def list_active(self) -> list[Principle]:
        return sorted(
            (p for p in self._principles if p.is_active), key=lambda p: p.priority
        )
