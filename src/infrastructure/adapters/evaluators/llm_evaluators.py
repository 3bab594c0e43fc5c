"""Language model implementations of the evaluator ports.

Each adapter builds a prompt, sends it through a MessagesClient and maps
the validated reply onto domain models. Transport and schema errors
propagate as ExternalServiceError subclasses; fallbacks are applied by the
calling services, not here.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from src.domain.models.automated_voter import PanelJudgment, Perspective
from src.domain.models.compliance import (
    LanguageQuality,
    Principle,
    PrincipleJudgment,
    SafetyAssessment,
    SafetyFlag,
)
from src.domain.models.published_entry import ChapterSummary, PlacementDecision
from src.domain.models.refinement import RefinementStage, RewriteResult
from src.domain.models.revision_proposal import (
    CouncilMember,
    DiscussionEntry,
    RevisionProposal,
    RevisionSynthesis,
    SynthesisRecommendation,
)
from src.domain.models.vote import VoteChoice
from src.infrastructure.adapters.evaluators.messages_client import (
    MessagesClient,
    parse_reply,
)
from src.infrastructure.adapters.evaluators.schemas import (
    LanguageReply,
    PanelVoteReply,
    PlacementReply,
    PrincipleJudgmentReply,
    RewriteReply,
    SafetyReply,
    SynthesisReply,
)

logger = structlog.get_logger()

JSON_ONLY = "Always respond with a single valid JSON object and nothing else."


class LlmJudgmentService:
    """Principle scoring, safety and language assessments."""

    def __init__(self, client: MessagesClient) -> None:
        self._client = client

    async def evaluate_principle(self, text: str, principle: Principle) -> PrincipleJudgment:
        system = (
            "You are a compliance evaluator for a community-curated wisdom canon. "
            "Evaluate the text against the given principle objectively. " + JSON_ONLY
        )
        prompt = (
            f"Principle: {principle.name}\n"
            f"Description: {principle.description}\n\n"
            f"Text:\n{text}\n\n"
            "Score how well the text satisfies the principle from 0.0 to 1.0.\n"
            'Reply as {"score": number, "reasoning": string}.'
        )
        reply = parse_reply(
            PrincipleJudgmentReply,
            await self._client.complete(system, prompt),
            self._client.service,
        )
        return PrincipleJudgment(score=reply.score, reasoning=reply.reasoning)

    async def assess_safety(self, text: str) -> SafetyAssessment:
        flags = ", ".join(flag.value for flag in SafetyFlag)
        system = "You are a content safety reviewer. " + JSON_ONLY
        prompt = (
            f"Text:\n{text}\n\n"
            f"Report any of these concerns: {flags}.\n"
            'Reply as {"is_safe": boolean, "flags": [string], "reasoning": string}.'
        )
        reply = parse_reply(
            SafetyReply, await self._client.complete(system, prompt), self._client.service
        )
        known = {flag.value: flag for flag in SafetyFlag}
        unknown = [name for name in reply.flags if name not in known]
        if unknown:
            logger.debug("unknown_safety_flags", flags=unknown)
        raised = tuple(known[name] for name in reply.flags if name in known)
        return SafetyAssessment(
            is_safe=reply.is_safe and not raised,
            flags=raised,
            reasoning=reply.reasoning,
        )

    async def assess_language(self, text: str) -> LanguageQuality:
        system = "You are a copy editor. " + JSON_ONLY
        prompt = (
            f"Text:\n{text}\n\n"
            "Rate fluency and grammar from 0.0 to 1.0.\n"
            'Reply as {"fluency": number, "grammar": number, "notes": string}.'
        )
        reply = parse_reply(
            LanguageReply, await self._client.complete(system, prompt), self._client.service
        )
        return LanguageQuality(
            fluency=reply.fluency, grammar=reply.grammar, notes=reply.notes
        )


class LlmRewritingService:
    """Stage rewrites producing a Korean and English text pair."""

    def __init__(self, client: MessagesClient) -> None:
        self._client = client

    @property
    def model_name(self) -> str:
        return self._client.model

    async def rewrite(
        self, text: str, stage: RefinementStage, instructions: str
    ) -> RewriteResult:
        system = (
            "You edit submissions for a bilingual wisdom canon. Preserve the "
            "meaning of the text exactly. " + JSON_ONLY
        )
        prompt = (
            f"Stage: {stage.value}\n"
            f"Instructions: {instructions}\n\n"
            f"Text:\n{text}\n\n"
            'Reply as {"text_ko": string, "text_en": string, "change_summary": string}.'
        )
        reply = parse_reply(
            RewriteReply, await self._client.complete(system, prompt), self._client.service
        )
        return RewriteResult(
            text_ko=reply.text_ko.strip(),
            text_en=reply.text_en.strip(),
            change_summary=reply.change_summary,
        )


class LlmPlacementAnalyzer:
    """Chooses a chapter for approved content."""

    def __init__(self, client: MessagesClient) -> None:
        self._client = client

    async def analyze(
        self, text: str, chapters: Sequence[ChapterSummary]
    ) -> PlacementDecision:
        listing = "\n".join(
            f"- Chapter {c.chapter}: {c.theme} ({c.verse_count} verses)"
            for c in chapters
        ) or "- (no chapters yet)"
        system = "You organize a canon of wisdom texts into themed chapters. " + JSON_ONLY
        prompt = (
            f"Existing chapters:\n{listing}\n\n"
            f"New text:\n{text}\n\n"
            "Pick the best existing chapter, or a new chapter number after the "
            "last one if none fits.\n"
            'Reply as {"chapter": integer, "theme": string, "reasoning": string, '
            '"traditions": [string], "reflection": string}.'
        )
        reply = parse_reply(
            PlacementReply, await self._client.complete(system, prompt), self._client.service
        )
        return PlacementDecision(
            chapter=reply.chapter,
            theme=reply.theme,
            reasoning=reply.reasoning,
            traditions=tuple(reply.traditions),
            reflection=reply.reflection,
        )


class LlmPanelEvaluator:
    """Automated panel votes, council analyses and revision synthesis."""

    def __init__(self, client: MessagesClient) -> None:
        self._client = client

    async def cast_panel_vote(
        self, perspective: Perspective, title: str, text: str
    ) -> PanelJudgment:
        system = (
            f"You are a {perspective.name} ({perspective.name_ko}) on a review "
            f"panel. You pay particular attention to {perspective.focus}. " + JSON_ONLY
        )
        prompt = (
            f"Title: {title}\n\nText:\n{text}\n\n"
            "Should this text be adopted into the canon? Vote for, against or abstain.\n"
            'Reply as {"vote": "for"|"against"|"abstain", "reasoning": string, '
            '"confidence": number}.'
        )
        reply = parse_reply(
            PanelVoteReply, await self._client.complete(system, prompt), self._client.service
        )
        return PanelJudgment(
            vote=VoteChoice(reply.vote),
            reasoning=reply.reasoning,
            confidence=reply.confidence,
        )

    async def analyze_revision(
        self, member: CouncilMember, proposal: RevisionProposal
    ) -> str:
        system = f"You are {member.name}, a council member. {member.perspective}"
        prompt = (
            f"Original text:\n{proposal.original_text}\n\n"
            f"Proposed text:\n{proposal.proposed_text}\n\n"
            f"Rationale:\n{proposal.rationale}\n\n"
            "Write a short analysis of this revision."
        )
        return await self._client.complete(system, prompt)

    async def synthesize_revision(
        self, proposal: RevisionProposal, discussion: Sequence[DiscussionEntry]
    ) -> RevisionSynthesis:
        comments = "\n".join(
            f"- [{entry.author_kind.value}] {entry.content}" for entry in discussion
        ) or "- (no discussion)"
        system = "You synthesize community discussion about a proposed revision. " + JSON_ONLY
        prompt = (
            f"Original text:\n{proposal.original_text}\n\n"
            f"Proposed text:\n{proposal.proposed_text}\n\n"
            f"Rationale:\n{proposal.rationale}\n\n"
            f"Discussion:\n{comments}\n\n"
            'Reply as {"necessity": string, "meaning_diff": string, "impact": string, '
            '"community_summary": string, '
            '"recommendation": "approve"|"reject"|"conditional", "reasoning": string}.'
        )
        reply = parse_reply(
            SynthesisReply, await self._client.complete(system, prompt), self._client.service
        )
        return RevisionSynthesis(
            necessity=reply.necessity,
            meaning_diff=reply.meaning_diff,
            impact=reply.impact,
            community_summary=reply.community_summary,
            recommendation=SynthesisRecommendation(reply.recommendation),
            reasoning=reply.reasoning,
        )
