"""Configurable stubs for the external evaluator ports.

Each stub returns deterministic results by default and can be told to
fail, so the degradation paths of the pipeline services can be exercised
without network access.

WARNING: These stubs are NOT for production use.
Production adapters are in src/infrastructure/adapters/evaluators/.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from src.domain.errors.evaluator import (
    EvaluatorResponseError,
    EvaluatorUnavailableError,
    ExternalServiceError,
)
from src.domain.models.automated_voter import (
    PanelJudgment,
    Perspective,
    PerspectiveCategory,
)
from src.domain.models.compliance import (
    LanguageQuality,
    Principle,
    PrincipleJudgment,
    SafetyAssessment,
)
from src.domain.models.published_entry import (
    DEFAULT_THEME,
    ChapterSummary,
    PlacementDecision,
)
from src.domain.models.refinement import RefinementStage, RewriteResult
from src.domain.models.revision_proposal import (
    CouncilMember,
    DiscussionEntry,
    RevisionProposal,
    RevisionSynthesis,
    SynthesisRecommendation,
)
from src.domain.models.vote import VoteChoice


class JudgmentServiceStub:
    """Scores principles from a lookup table.

    Attributes:
        calls: Principle ids evaluated, in call order.
    """

    def __init__(self, default_score: float = 0.8) -> None:
        self._default_score = default_score
        self._scores: dict[str, float] = {}
        self._failing: set[str] = set()
        self._delays: dict[str, float] = {}
        self._safety = SafetyAssessment(is_safe=True, reasoning="no concerns")
        self._language = LanguageQuality(fluency=0.9, grammar=0.9)
        self._safety_error: ExternalServiceError | None = None
        self._language_error: ExternalServiceError | None = None
        self.calls: list[str] = []

    def set_score(self, principle_id: str, score: float) -> None:
        self._scores[principle_id] = score

    def fail_principle(self, principle_id: str) -> None:
        self._failing.add(principle_id)

    def delay_principle(self, principle_id: str, seconds: float) -> None:
        """Sleep before answering, to exercise call timeouts."""
        self._delays[principle_id] = seconds

    def set_safety(self, assessment: SafetyAssessment) -> None:
        self._safety = assessment

    def fail_safety(self) -> None:
        self._safety_error = EvaluatorUnavailableError("judgment", "safety check down")

    def set_language(self, quality: LanguageQuality) -> None:
        self._language = quality

    def fail_language(self) -> None:
        self._language_error = EvaluatorUnavailableError("judgment", "language check down")

    async def evaluate_principle(self, text: str, principle: Principle) -> PrincipleJudgment:
        self.calls.append(principle.id)
        if principle.id in self._delays:
            await asyncio.sleep(self._delays[principle.id])
        if principle.id in self._failing:
            raise EvaluatorUnavailableError("judgment", f"{principle.id} evaluation failed")
        score = self._scores.get(principle.id, self._default_score)
        return PrincipleJudgment(score=score, reasoning=f"{principle.name}: {score}")

    async def assess_safety(self, text: str) -> SafetyAssessment:
        if self._safety_error is not None:
            raise self._safety_error
        return self._safety

    async def assess_language(self, text: str) -> LanguageQuality:
        if self._language_error is not None:
            raise self._language_error
        return self._language


class RewritingServiceStub:
    """Returns the input text tagged with the stage, or a preset result."""

    def __init__(self, model_name: str = "stub-writer") -> None:
        self._model_name = model_name
        self._results: dict[RefinementStage, RewriteResult] = {}
        self._error: ExternalServiceError | None = None
        self.calls: list[tuple[str, RefinementStage]] = []

    @property
    def model_name(self) -> str:
        return self._model_name

    def set_result(self, stage: RefinementStage, result: RewriteResult) -> None:
        self._results[stage] = result

    def fail_with(self, error: ExternalServiceError | None) -> None:
        self._error = error

    async def rewrite(
        self, text: str, stage: RefinementStage, instructions: str
    ) -> RewriteResult:
        self.calls.append((text, stage))
        if self._error is not None:
            raise self._error
        if stage in self._results:
            return self._results[stage]
        return RewriteResult(
            text_ko=text,
            text_en=f"{text} ({stage.value})",
            change_summary=f"{stage.value} pass",
        )


class SimilarityServiceStub:
    """1.0 for identical texts, otherwise the configured score."""

    def __init__(self, score: float = 0.95) -> None:
        self._score = score
        self._error: ExternalServiceError | None = None

    def set_score(self, score: float) -> None:
        self._score = score

    def fail(self) -> None:
        self._error = EvaluatorUnavailableError("similarity", "embeddings unavailable")

    async def similarity(self, text_a: str, text_b: str) -> float:
        if self._error is not None:
            raise self._error
        if text_a == text_b:
            return 1.0
        return self._score


class PlacementAnalyzerStub:
    """Returns a preset decision, or chapter 1 with the default theme."""

    def __init__(self) -> None:
        self._decision: PlacementDecision | None = None
        self._error: ExternalServiceError | None = None
        self.seen_chapters: list[ChapterSummary] = []

    def set_decision(self, decision: PlacementDecision) -> None:
        self._decision = decision

    def fail(self) -> None:
        self._error = EvaluatorUnavailableError("placement", "analysis unavailable")

    async def analyze(
        self, text: str, chapters: Sequence[ChapterSummary]
    ) -> PlacementDecision:
        self.seen_chapters = list(chapters)
        if self._error is not None:
            raise self._error
        if self._decision is not None:
            return self._decision
        return PlacementDecision(
            chapter=1, theme=DEFAULT_THEME, reasoning="stub placement"
        )


class PanelEvaluatorStub:
    """Votes by perspective category, with per-perspective overrides.

    Attributes:
        max_in_flight: Highest number of concurrent cast_panel_vote calls seen.
        panel_calls: Perspective names in call order.
    """

    def __init__(self, default_vote: VoteChoice = VoteChoice.FOR) -> None:
        self._category_votes: dict[PerspectiveCategory, VoteChoice] = {}
        self._default_vote = default_vote
        self._failing: set[str] = set()
        self._failing_members: set[str] = set()
        self._synthesis: RevisionSynthesis | None = None
        self._synthesis_error: ExternalServiceError | None = None
        self._in_flight = 0
        self.max_in_flight = 0
        self.panel_calls: list[str] = []

    def set_category_vote(self, category: PerspectiveCategory, vote: VoteChoice) -> None:
        self._category_votes[category] = vote

    def fail_perspective(self, name: str) -> None:
        self._failing.add(name)

    def fail_member(self, member_id: str) -> None:
        self._failing_members.add(member_id)

    def set_synthesis(self, synthesis: RevisionSynthesis) -> None:
        self._synthesis = synthesis

    def return_unparseable_synthesis(self, raw_response: str) -> None:
        self._synthesis_error = EvaluatorResponseError(
            "panel_evaluator", "synthesis did not match schema", raw_response
        )

    async def cast_panel_vote(
        self, perspective: Perspective, title: str, text: str
    ) -> PanelJudgment:
        self.panel_calls.append(perspective.name)
        self._in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self._in_flight)
        try:
            await asyncio.sleep(0)
            if perspective.name in self._failing:
                raise EvaluatorUnavailableError("panel_evaluator", "vote failed")
            vote = self._category_votes.get(perspective.category, self._default_vote)
            return PanelJudgment(
                vote=vote,
                reasoning=f"{perspective.name} votes {vote.value}",
                confidence=0.8,
            )
        finally:
            self._in_flight -= 1

    async def analyze_revision(
        self, member: CouncilMember, proposal: RevisionProposal
    ) -> str:
        if member.id in self._failing_members:
            raise EvaluatorUnavailableError("panel_evaluator", "analysis failed")
        return f"{member.name}: the revision of {proposal.entry_id} reads clearly."

    async def synthesize_revision(
        self, proposal: RevisionProposal, discussion: Sequence[DiscussionEntry]
    ) -> RevisionSynthesis:
        if self._synthesis_error is not None:
            raise self._synthesis_error
        if self._synthesis is not None:
            return self._synthesis
        return RevisionSynthesis(
            necessity="The wording is dated.",
            meaning_diff="No change in meaning.",
            impact="Clearer for new readers.",
            community_summary=f"{len(discussion)} discussion entries, broadly positive.",
            recommendation=SynthesisRecommendation.APPROVE,
            reasoning="Preserves meaning while improving clarity.",
        )
