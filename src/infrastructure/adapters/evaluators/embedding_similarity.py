"""Embedding-based text similarity.

Embeds both texts in one request and returns their cosine similarity,
clamped to [0, 1].
"""

from __future__ import annotations

import math
from collections.abc import Sequence

import httpx

from src.config.evaluator_config import EvaluatorServiceConfig
from src.domain.errors.evaluator import (
    EvaluatorResponseError,
    EvaluatorUnavailableError,
)

EMBEDDINGS_PATH = "/v1/embeddings"
SERVICE_NAME = "similarity"


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity; 0.0 when either vector is zero or lengths differ."""
    if len(a) != len(b) or not a:
        return 0.0
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (norm_a * norm_b)


class EmbeddingSimilarityService:
    """SimilarityServiceProtocol over an embeddings endpoint."""

    def __init__(
        self,
        config: EvaluatorServiceConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._url = f"{config.embeddings_base_url.rstrip('/')}{EMBEDDINGS_PATH}"

    async def similarity(self, text_a: str, text_b: str) -> float:
        """Cosine similarity of the two texts' embeddings.

        Raises:
            EvaluatorUnavailableError: Missing key, transport failure or non-200.
            EvaluatorResponseError: Reply did not contain two embeddings.
        """
        api_key = self._config.embeddings_api_key
        if not api_key:
            raise EvaluatorUnavailableError(
                SERVICE_NAME, f"{self._config.embeddings_api_key_env} is not set"
            )

        async with httpx.AsyncClient(
            timeout=self._config.timeout_seconds, transport=self._transport
        ) as client:
            try:
                response = await client.post(
                    self._url,
                    json={
                        "model": self._config.embeddings_model,
                        "input": [text_a, text_b],
                        "input_type": "document",
                    },
                    headers={"Authorization": f"Bearer {api_key}"},
                )
            except httpx.TimeoutException as e:
                raise EvaluatorUnavailableError(SERVICE_NAME, "request timeout") from e
            except httpx.RequestError as e:
                raise EvaluatorUnavailableError(SERVICE_NAME, f"request failed: {e}") from e

        if response.status_code != 200:
            raise EvaluatorUnavailableError(
                SERVICE_NAME,
                f"unexpected status {response.status_code}",
                status_code=response.status_code,
            )
        try:
            data = sorted(response.json()["data"], key=lambda item: item["index"])
            first, second = data[0]["embedding"], data[1]["embedding"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise EvaluatorResponseError(
                SERVICE_NAME, "reply did not contain two embeddings", response.text
            ) from e
        return max(0.0, min(1.0, cosine_similarity(first, second)))
