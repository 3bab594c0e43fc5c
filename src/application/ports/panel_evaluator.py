"""Panel evaluator port.

Serves the automated voting panel, the revision council analyses and the
synthesis pass. Every call is an independent round trip.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from src.domain.models.automated_voter import PanelJudgment, Perspective
from src.domain.models.revision_proposal import (
    CouncilMember,
    DiscussionEntry,
    RevisionProposal,
    RevisionSynthesis,
)


@runtime_checkable
class PanelEvaluatorProtocol(Protocol):
    """Protocol for automated panel and council calls."""

    async def cast_panel_vote(
        self, perspective: Perspective, title: str, text: str
    ) -> PanelJudgment:
        """Evaluate a subject from one perspective and vote.

        Raises:
            ExternalServiceError: On failure or malformed output.
        """
        ...

    async def analyze_revision(
        self, member: CouncilMember, proposal: RevisionProposal
    ) -> str:
        """Write one council member's analysis of a revision.

        Raises:
            ExternalServiceError: On failure.
        """
        ...

    async def synthesize_revision(
        self, proposal: RevisionProposal, discussion: Sequence[DiscussionEntry]
    ) -> RevisionSynthesis:
        """Synthesize the proposal and all discussion entries.

        Raises:
            EvaluatorResponseError: Output did not match the schema; the raw
                text is carried on the error.
            EvaluatorUnavailableError: Transport failure or timeout.
        """
        ...
