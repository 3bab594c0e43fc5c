"""Unit tests for the automated evaluator panel.

Key Test Scenarios:
1. Panel size never drops below the minimum
2. Category split by ratio with minimum one per category
3. Sequential batches bound concurrency
4. Failed evaluations become abstentions
"""

from __future__ import annotations

import pytest

from src.application.services.automated_panel import (
    FAILED_EVALUATION_REASONING,
    AutomatedPanel,
    compute_panel_composition,
    panel_size_for,
    round_half_up,
    select_perspectives,
)
from src.config.governance_config import DEFAULT_VOTING_CONFIG
from src.domain.models.automated_voter import (
    PERSPECTIVE_POOLS,
    PanelComposition,
    PerspectiveCategory,
)
from src.domain.models.vote import VoteChoice
from src.infrastructure.stubs import PanelEvaluatorStub
from tests.helpers.factories import make_session


class TestPanelSizing:
    """Tests for panel size and composition."""

    @pytest.mark.parametrize(("value", "expected"), [(2.5, 3), (1.5, 2), (1.4, 1), (2.8, 3)])
    def test_round_half_up(self, value: float, expected: int) -> None:
        assert round_half_up(value) == expected

    @pytest.mark.parametrize(("eligible", "expected"), [(0, 5), (3, 5), (5, 5), (12, 12)])
    def test_panel_size_has_floor(self, eligible: int, expected: int) -> None:
        """The panel matches the eligible population, at least five."""
        assert panel_size_for(eligible, DEFAULT_VOTING_CONFIG) == expected

    def test_composition_for_seven(self) -> None:
        """7 splits as 3 tradition, 2 function, 1 contrarian, 1 meta."""
        assert compute_panel_composition(7) == PanelComposition(
            tradition=3, function=2, contrarian=1, meta=1
        )

    def test_composition_for_five_exceeds_size(self) -> None:
        """Per-category minimums push a panel of 5 to 6 members."""
        composition = compute_panel_composition(5)

        assert composition == PanelComposition(
            tradition=2, function=2, contrarian=1, meta=1
        )
        assert composition.total == 6

    def test_composition_for_twenty(self) -> None:
        assert compute_panel_composition(20) == PanelComposition(
            tradition=8, function=6, contrarian=4, meta=2
        )

    def test_selection_cycles_through_pool(self) -> None:
        """More seats than pool members reuse the pool from the start."""
        composition = PanelComposition(tradition=10, function=1, contrarian=1, meta=1)

        selected = select_perspectives(composition)

        tradition_pool = PERSPECTIVE_POOLS[PerspectiveCategory.TRADITION]
        assert len(selected) == 13
        assert selected[8] == tradition_pool[0]
        assert selected[9] == tradition_pool[1]
        assert selected[10].category == PerspectiveCategory.FUNCTION


class TestConvene:
    """Tests for AutomatedPanel.convene()."""

    @pytest.mark.asyncio
    async def test_one_voter_per_seat(
        self, automated_panel: AutomatedPanel, panel_evaluator: PanelEvaluatorStub
    ) -> None:
        """Seven eligible humans give a seven member panel."""
        session = make_session(eligible_human_count=7)

        voters = await automated_panel.convene(session, "Title", "Text")

        assert len(voters) == 7
        assert all(v.session_id == session.id for v in voters)
        assert len({v.id for v in voters}) == 7
        assert all(v.judgment.vote == VoteChoice.FOR for v in voters)

    @pytest.mark.asyncio
    async def test_batches_bound_concurrency(
        self, automated_panel: AutomatedPanel, panel_evaluator: PanelEvaluatorStub
    ) -> None:
        """With a batch size of 2 at most two evaluations run at once."""
        session = make_session(eligible_human_count=7)

        await automated_panel.convene(session, "Title", "Text")

        assert panel_evaluator.max_in_flight == 2
        assert len(panel_evaluator.panel_calls) == 7

    @pytest.mark.asyncio
    async def test_category_votes(
        self, automated_panel: AutomatedPanel, panel_evaluator: PanelEvaluatorStub
    ) -> None:
        """Contrarian voters vote according to their category."""
        panel_evaluator.set_category_vote(PerspectiveCategory.CONTRARIAN, VoteChoice.AGAINST)
        session = make_session(eligible_human_count=10)

        voters = await automated_panel.convene(session, "Title", "Text")

        contrarians = [v for v in voters if v.category == PerspectiveCategory.CONTRARIAN]
        assert len(contrarians) == 2
        assert all(v.judgment.vote == VoteChoice.AGAINST for v in contrarians)

    @pytest.mark.asyncio
    async def test_failed_evaluation_abstains(
        self, automated_panel: AutomatedPanel, panel_evaluator: PanelEvaluatorStub
    ) -> None:
        """A failed call keeps the seat as an abstention."""
        failing = PERSPECTIVE_POOLS[PerspectiveCategory.TRADITION][0].name
        panel_evaluator.fail_perspective(failing)
        session = make_session(eligible_human_count=7)

        voters = await automated_panel.convene(session, "Title", "Text")

        failed = [v for v in voters if v.evaluation_failed]
        assert len(voters) == 7
        assert len(failed) == 1
        assert failed[0].perspective.name == failing
        assert failed[0].judgment.vote == VoteChoice.ABSTAIN
        assert failed[0].judgment.reasoning == FAILED_EVALUATION_REASONING
