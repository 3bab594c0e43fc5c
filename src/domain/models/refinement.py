"""Refinement stage model and append-only refinement ledger.

Stages progress strictly raw -> draft -> refined -> canonical. The
successor of each stage is fixed by STAGE_TRANSITION_MATRIX, so "which
stage comes next" is a total function over the enum rather than string
comparison.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

from uuid6 import uuid7


class RefinementStage(Enum):
    """Refinement stage of a submission's text.

    Stages:
        RAW: Text as submitted; never produced by an advance.
        DRAFT: Light cleanup preserving the author's voice.
        REFINED: Tightened, more poetic phrasing.
        CANONICAL: Final scriptural register.
    """

    RAW = "raw"
    DRAFT = "draft"
    REFINED = "refined"
    CANONICAL = "canonical"

    @property
    def ordinal(self) -> int:
        """Position in the stage order (raw = 0)."""
        return STAGE_ORDER.index(self)

    def successor(self) -> RefinementStage | None:
        """Get the only stage this one may advance to.

        Returns:
            The next stage, or None if this is the final stage.
        """
        return STAGE_TRANSITION_MATRIX[self]

    def is_final(self) -> bool:
        """True for the canonical stage."""
        return self.successor() is None


STAGE_ORDER: tuple[RefinementStage, ...] = (
    RefinementStage.RAW,
    RefinementStage.DRAFT,
    RefinementStage.REFINED,
    RefinementStage.CANONICAL,
)

STAGE_TRANSITION_MATRIX: dict[RefinementStage, RefinementStage | None] = {
    RefinementStage.RAW: RefinementStage.DRAFT,
    RefinementStage.DRAFT: RefinementStage.REFINED,
    RefinementStage.REFINED: RefinementStage.CANONICAL,
    RefinementStage.CANONICAL: None,
}

# Instructions handed to the rewriting service; each later stage asks for
# more compression and a more poetic register while preserving meaning.
STAGE_INSTRUCTIONS: dict[RefinementStage, str] = {
    RefinementStage.DRAFT: (
        "Correct grammar and spelling and smooth awkward phrasing. "
        "Keep the author's wording and voice wherever possible."
    ),
    RefinementStage.REFINED: (
        "Condense the text and lift its register toward measured, "
        "poetic prose. Remove redundancy without dropping any idea."
    ),
    RefinementStage.CANONICAL: (
        "Render the text as a concise scriptural verse with rhythm and "
        "economy. Preserve the core meaning exactly."
    ),
}


@dataclass(frozen=True, eq=True)
class RewriteResult:
    """Output of the rewriting service for one stage.

    Attributes:
        text_ko: Rewritten Korean text (required, non-empty).
        text_en: Rewritten English text.
        change_summary: What changed and why.
    """

    text_ko: str
    text_en: str
    change_summary: str


@dataclass(frozen=True, eq=True)
class RefinementRecord:
    """One entry in a submission's append-only refinement ledger.

    Attributes:
        id: UUIDv7 identifier.
        submission_id: The refined submission.
        stage: Stage this record produced.
        text_ko: Korean text at this stage.
        text_en: English text at this stage.
        similarity_to_previous: Similarity of text_ko to the input text.
        change_summary: Summary from the rewriting service.
        similarity_warning: True when similarity fell below the drift threshold.
        prompt_hash: SHA-256 of the instructions and input text.
        model: Model that produced the rewrite.
        created_at: When the record was written.
    """

    id: UUID
    submission_id: UUID
    stage: RefinementStage
    text_ko: str
    text_en: str
    similarity_to_previous: float
    change_summary: str
    similarity_warning: bool
    prompt_hash: str
    model: str
    created_at: datetime

    @classmethod
    def create(
        cls,
        submission_id: UUID,
        stage: RefinementStage,
        rewrite: RewriteResult,
        similarity: float,
        similarity_warning: bool,
        prompt_hash: str,
        model: str,
        created_at: datetime,
    ) -> RefinementRecord:
        """Create a record for a completed stage.

        Raises:
            ValueError: If stage is RAW, which is never produced by an advance.
        """
        if stage == RefinementStage.RAW:
            raise ValueError("raw stage records are never written")
        return cls(
            id=uuid7(),
            submission_id=submission_id,
            stage=stage,
            text_ko=rewrite.text_ko,
            text_en=rewrite.text_en,
            similarity_to_previous=similarity,
            change_summary=rewrite.change_summary,
            similarity_warning=similarity_warning,
            prompt_hash=prompt_hash,
            model=model,
            created_at=created_at,
        )
