"""Similarity service port used to measure semantic drift."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class SimilarityServiceProtocol(Protocol):
    """Protocol for semantic similarity scoring."""

    async def similarity(self, text_a: str, text_b: str) -> float:
        """Score semantic similarity of two texts.

        Returns:
            Similarity in [0, 1] (1 = identical meaning).

        Raises:
            ExternalServiceError: If the score cannot be produced.
        """
        ...
