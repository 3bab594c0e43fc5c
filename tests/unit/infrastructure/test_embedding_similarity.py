"""Unit tests for EmbeddingSimilarityService."""

import json
import os
from unittest.mock import patch

import httpx
import pytest

from src.config.evaluator_config import EvaluatorServiceConfig
from src.domain.errors.evaluator import EvaluatorResponseError, EvaluatorUnavailableError
from src.infrastructure.adapters.evaluators.embedding_similarity import (
    EmbeddingSimilarityService,
    cosine_similarity,
)

CONFIG = EvaluatorServiceConfig(
    embeddings_base_url="https://embed.test",
    embeddings_api_key_env="TEST_EMBED_KEY",
    embeddings_model="embed-1",
)


def _service(handler) -> EmbeddingSimilarityService:  # type: ignore[no-untyped-def]
    return EmbeddingSimilarityService(CONFIG, transport=httpx.MockTransport(handler))


def _embeddings(first: list[float], second: list[float]) -> httpx.Response:
    # Returned out of order; the service sorts by index
    return httpx.Response(
        200,
        json={
            "data": [
                {"index": 1, "embedding": second},
                {"index": 0, "embedding": first},
            ]
        },
    )


@pytest.fixture(autouse=True)
def api_key():
    with patch.dict(os.environ, {"TEST_EMBED_KEY": "secret"}):
        yield


class TestCosineSimilarity:
    """Tests for cosine_similarity."""

    def test_identical(self) -> None:
        assert cosine_similarity([1.0, 2.0], [1.0, 2.0]) == pytest.approx(1.0)

    def test_orthogonal(self) -> None:
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == 0.0

    def test_zero_vector(self) -> None:
        assert cosine_similarity([0.0, 0.0], [1.0, 1.0]) == 0.0

    def test_length_mismatch(self) -> None:
        assert cosine_similarity([1.0], [1.0, 1.0]) == 0.0


class TestSimilarity:
    """Tests for EmbeddingSimilarityService.similarity()."""

    @pytest.mark.asyncio
    async def test_request_and_score(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return _embeddings([1.0, 0.0], [1.0, 1.0])

        score = await _service(handler).similarity("a", "b")

        assert score == pytest.approx(0.7071, abs=1e-4)
        body = json.loads(seen[0].content)
        assert body["input"] == ["a", "b"]
        assert body["model"] == "embed-1"
        assert seen[0].headers["Authorization"] == "Bearer secret"

    @pytest.mark.asyncio
    async def test_negative_similarity_clamped(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return _embeddings([1.0, 0.0], [-1.0, 0.0])

        assert await _service(handler).similarity("a", "b") == 0.0

    @pytest.mark.asyncio
    async def test_server_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        with pytest.raises(EvaluatorUnavailableError):
            await _service(handler).similarity("a", "b")

    @pytest.mark.asyncio
    async def test_malformed_reply(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"data": [{"index": 0, "embedding": [1.0]}]})

        with pytest.raises(EvaluatorResponseError):
            await _service(handler).similarity("a", "b")

    @pytest.mark.asyncio
    async def test_missing_key(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(EvaluatorUnavailableError):
                await _service(handler).similarity("a", "b")
