"""Automated evaluator panel.

Synthesizes a fresh panel of perspective-bound voters for a session and
collects one vote from each. The panel is sized to the eligible human
population (never below the configured minimum) and split across four
perspective pools by fixed ratios.

Evaluations run in sequential batches, concurrently within a batch, to
bound the load on the evaluator. A failed evaluation becomes an abstain
so the panel always has its full size.
"""

from __future__ import annotations

import asyncio
import math

from src.application.ports.panel_evaluator import PanelEvaluatorProtocol
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.services.base import LoggingMixin
from src.application.services.compliance_scorer import DEFAULT_CALL_TIMEOUT_SECONDS
from src.config.governance_config import DEFAULT_VOTING_CONFIG, VotingConfig
from src.domain.models.automated_voter import (
    PERSPECTIVE_POOLS,
    AutomatedVoter,
    PanelComposition,
    PanelJudgment,
    Perspective,
    PerspectiveCategory,
)
from src.domain.models.vote import VoteChoice
from src.domain.models.voting_session import VotingSession

FAILED_EVALUATION_REASONING = "Evaluation failed due to an error."


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return math.floor(value + 0.5)


def panel_size_for(eligible_human_count: int, config: VotingConfig) -> int:
    return max(config.min_panel_size, eligible_human_count)


def compute_panel_composition(
    size: int, config: VotingConfig = DEFAULT_VOTING_CONFIG
) -> PanelComposition:
    """Split a panel of the given size across the four categories.

    Each ratio-based category gets at least one member; meta takes the
    remainder, also at least one. Because of the minimums the total can
    exceed size for very small panels.
    """
    tradition = max(1, round_half_up(size * config.tradition_ratio))
    function = max(1, round_half_up(size * config.function_ratio))
    contrarian = max(1, round_half_up(size * config.contrarian_ratio))
    meta = max(1, size - tradition - function - contrarian)
    return PanelComposition(
        tradition=tradition, function=function, contrarian=contrarian, meta=meta
    )


def select_perspectives(composition: PanelComposition) -> list[Perspective]:
    """Pick perspectives for each category, cycling through its pool."""
    selected: list[Perspective] = []
    for category in PerspectiveCategory:
        pool = PERSPECTIVE_POOLS[category]
        count = composition.count_for(category)
        selected.extend(pool[i % len(pool)] for i in range(count))
    return selected


class AutomatedPanel(LoggingMixin):
    """Builds and runs the automated voter panel for a session."""

    def __init__(
        self,
        evaluator: PanelEvaluatorProtocol,
        time_authority: TimeAuthorityProtocol,
        config: VotingConfig = DEFAULT_VOTING_CONFIG,
        call_timeout_seconds: float = DEFAULT_CALL_TIMEOUT_SECONDS,
    ) -> None:
        self._evaluator = evaluator
        self._time = time_authority
        self._config = config
        self._call_timeout_seconds = call_timeout_seconds
        self._init_logger(component="voting")

    async def convene(
        self, session: VotingSession, title: str, text: str
    ) -> list[AutomatedVoter]:
        """Generate the panel for a session and collect every member's vote.

        Args:
            session: The session being voted on.
            title: Subject title shown to the evaluators.
            text: Subject text.

        Returns:
            One AutomatedVoter per panel seat, in selection order.
        """
        size = panel_size_for(session.eligible_human_count, self._config)
        composition = compute_panel_composition(size, self._config)
        perspectives = select_perspectives(composition)
        log = self._log_operation(
            "convene",
            session_id=str(session.id),
            panel_size=len(perspectives),
        )
        log.info(
            "panel_convened",
            tradition=composition.tradition,
            function=composition.function,
            contrarian=composition.contrarian,
            meta=composition.meta,
        )

        voters: list[AutomatedVoter] = []
        batch_size = self._config.panel_batch_size
        for start in range(0, len(perspectives), batch_size):
            batch = perspectives[start : start + batch_size]
            voters.extend(
                await asyncio.gather(
                    *(
                        self._evaluate(session, perspective, title, text)
                        for perspective in batch
                    )
                )
            )

        log.info(
            "panel_completed",
            failed=sum(1 for v in voters if v.evaluation_failed),
        )
        return voters

    async def _evaluate(
        self,
        session: VotingSession,
        perspective: Perspective,
        title: str,
        text: str,
    ) -> AutomatedVoter:
        failed = False
        try:
            judgment = await asyncio.wait_for(
                self._evaluator.cast_panel_vote(perspective, title, text),
                timeout=self._call_timeout_seconds,
            )
        except Exception as exc:
            self._log.warning(
                "panel_evaluation_failed",
                session_id=str(session.id),
                perspective=perspective.name,
                error=str(exc) or type(exc).__name__,
            )
            judgment = PanelJudgment(
                vote=VoteChoice.ABSTAIN, reasoning=FAILED_EVALUATION_REASONING
            )
            failed = True
        return AutomatedVoter.create(
            session_id=session.id,
            perspective=perspective,
            judgment=judgment,
            evaluation_failed=failed,
            created_at=self._time.now(),
        )
