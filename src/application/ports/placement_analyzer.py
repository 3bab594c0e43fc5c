"""Placement analysis port."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from src.domain.models.published_entry import ChapterSummary, PlacementDecision


@runtime_checkable
class PlacementAnalyzerProtocol(Protocol):
    """Protocol for choosing where approved content belongs."""

    async def analyze(
        self, text: str, chapters: Sequence[ChapterSummary]
    ) -> PlacementDecision:
        """Choose a chapter (existing or new) for the text.

        Args:
            text: The final text of the approved submission.
            chapters: Current chapters with themes and verse counts.

        Returns:
            PlacementDecision with chapter >= 1.

        Raises:
            ExternalServiceError: On failure or malformed output.
        """
        ...
