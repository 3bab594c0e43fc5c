"""Automated panel domain models.

Each voting session gets a freshly synthesized panel of automated voters.
A voter adopts one named perspective from one of four pools and casts
exactly one vote with a rationale.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

from uuid6 import uuid7

from src.domain.models.vote import VoteChoice


class PerspectiveCategory(Enum):
    """Pool a perspective is drawn from."""

    TRADITION = "tradition"
    FUNCTION = "function"
    CONTRARIAN = "contrarian"
    META = "meta"


@dataclass(frozen=True, eq=True)
class Perspective:
    """A named evaluator persona.

    Attributes:
        category: Pool the perspective belongs to.
        name: English label.
        name_ko: Korean label.
        focus: What this perspective pays attention to.
    """

    category: PerspectiveCategory
    name: str
    name_ko: str
    focus: str


TRADITION_PERSPECTIVES: tuple[Perspective, ...] = (
    Perspective(
        PerspectiveCategory.TRADITION,
        "Buddhist Scholar",
        "불교 학자",
        "impermanence, compassion and the middle way",
    ),
    Perspective(
        PerspectiveCategory.TRADITION,
        "Christian Theologian",
        "기독교 신학자",
        "grace, love of neighbour and redemption",
    ),
    Perspective(
        PerspectiveCategory.TRADITION,
        "Islamic Scholar",
        "이슬람 학자",
        "submission, justice and mercy",
    ),
    Perspective(
        PerspectiveCategory.TRADITION,
        "Hindu Philosopher",
        "힌두 철학자",
        "dharma, karma and the unity of self and whole",
    ),
    Perspective(
        PerspectiveCategory.TRADITION,
        "Stoic Sage",
        "스토아 현자",
        "virtue, reason and acceptance of what cannot be changed",
    ),
    Perspective(
        PerspectiveCategory.TRADITION,
        "Daoist Master",
        "도교 스승",
        "harmony, simplicity and effortless action",
    ),
    Perspective(
        PerspectiveCategory.TRADITION,
        "Jewish Rabbinical Scholar",
        "유대교 랍비 학자",
        "covenant, ethical law and interpretive debate",
    ),
    Perspective(
        PerspectiveCategory.TRADITION,
        "Indigenous Wisdom Keeper",
        "원주민 지혜 전승자",
        "kinship with the land and ancestral memory",
    ),
)

FUNCTION_PERSPECTIVES: tuple[Perspective, ...] = (
    Perspective(
        PerspectiveCategory.FUNCTION,
        "Ethics Reviewer",
        "윤리 검토자",
        "harm, fairness and moral consistency",
    ),
    Perspective(
        PerspectiveCategory.FUNCTION,
        "Scientific Fact-Checker",
        "과학 사실 검증자",
        "claims that contradict established evidence",
    ),
    Perspective(
        PerspectiveCategory.FUNCTION,
        "Literary Critic",
        "문학 비평가",
        "clarity, imagery and literary merit",
    ),
    Perspective(
        PerspectiveCategory.FUNCTION,
        "Cultural Sensitivity Reviewer",
        "문화 감수성 검토자",
        "respect for cultures and communities",
    ),
    Perspective(
        PerspectiveCategory.FUNCTION,
        "Psychological Wellbeing Assessor",
        "심리 웰빙 평가자",
        "effects on readers' mental wellbeing",
    ),
)

CONTRARIAN_PERSPECTIVES: tuple[Perspective, ...] = (
    Perspective(
        PerspectiveCategory.CONTRARIAN,
        "Devil's Advocate",
        "악마의 대변인",
        "the strongest case against adoption",
    ),
    Perspective(
        PerspectiveCategory.CONTRARIAN,
        "Skeptical Rationalist",
        "회의적 합리주의자",
        "unsupported or dogmatic claims",
    ),
    Perspective(
        PerspectiveCategory.CONTRARIAN,
        "Inter-tradition Harmonizer",
        "전통 간 조화자",
        "whether the text privileges one tradition over others",
    ),
)

META_PERSPECTIVES: tuple[Perspective, ...] = (
    Perspective(
        PerspectiveCategory.META,
        "Constitutional Guardian",
        "헌법 수호자",
        "fit with the founding principles of the canon",
    ),
    Perspective(
        PerspectiveCategory.META,
        "Perennial Philosopher",
        "영원 철학자",
        "truths shared across all traditions",
    ),
)

PERSPECTIVE_POOLS: dict[PerspectiveCategory, tuple[Perspective, ...]] = {
    PerspectiveCategory.TRADITION: TRADITION_PERSPECTIVES,
    PerspectiveCategory.FUNCTION: FUNCTION_PERSPECTIVES,
    PerspectiveCategory.CONTRARIAN: CONTRARIAN_PERSPECTIVES,
    PerspectiveCategory.META: META_PERSPECTIVES,
}


@dataclass(frozen=True, eq=True)
class PanelComposition:
    """How many panel members each category contributes."""

    tradition: int
    function: int
    contrarian: int
    meta: int

    @property
    def total(self) -> int:
        return self.tradition + self.function + self.contrarian + self.meta

    def count_for(self, category: PerspectiveCategory) -> int:
        return getattr(self, category.value)


@dataclass(frozen=True, eq=True)
class PanelJudgment:
    """Vote returned by the panel evaluator for one perspective.

    Attributes:
        vote: for / against / abstain.
        reasoning: Short rationale.
        confidence: Self-reported confidence in [0, 1].
    """

    vote: VoteChoice
    reasoning: str
    confidence: float = 0.0


@dataclass(frozen=True, eq=True)
class AutomatedVoter:
    """A panel member generated for one session.

    Attributes:
        id: UUIDv7 identifier; doubles as the voter id of its vote.
        session_id: The session the voter belongs to.
        perspective: The persona the voter adopted.
        judgment: The vote and rationale it produced.
        evaluation_failed: True when the evaluator call failed and the
            voter abstained by default.
        created_at: When the voter was generated.
    """

    id: UUID
    session_id: UUID
    perspective: Perspective
    judgment: PanelJudgment
    evaluation_failed: bool
    created_at: datetime

    @classmethod
    def create(
        cls,
        session_id: UUID,
        perspective: Perspective,
        judgment: PanelJudgment,
        evaluation_failed: bool,
        created_at: datetime,
    ) -> AutomatedVoter:
        return cls(
            id=uuid7(),
            session_id=session_id,
            perspective=perspective,
            judgment=judgment,
            evaluation_failed=evaluation_failed,
            created_at=created_at,
        )

    @property
    def category(self) -> PerspectiveCategory:
        return self.perspective.category
