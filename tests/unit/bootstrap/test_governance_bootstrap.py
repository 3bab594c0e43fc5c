"""Unit tests for governance dependency wiring.

Key Test Scenarios:
- Storage backend follows DATABASE_URL
- Evaluators follow the API key; similarity needs its own key
- Singletons are shared until reset
"""

import os
from unittest.mock import patch

import pytest

from src.bootstrap.database import reset_database_bootstrap
from src.bootstrap.governance import (
    build_llm_evaluators,
    get_audit_outbox,
    get_consensus_engine,
    get_evaluators,
    get_rate_limiter,
    get_revision_service,
    get_storage,
    reset_governance_dependencies,
    set_storage,
)
from src.config.evaluator_config import EvaluatorServiceConfig
from src.infrastructure.adapters.evaluators import (
    EmbeddingSimilarityService,
    LlmJudgmentService,
)
from src.infrastructure.adapters.persistence import PostgresSubmissionRepository
from src.infrastructure.stubs import (
    JudgmentServiceStub,
    RateLimiterStub,
    SimilarityServiceStub,
    SubmissionRepositoryStub,
)

CLEAN_ENV = {
    "DATABASE_URL": "",
    "TEST_LLM_KEY": "",
    "TEST_EMBED_KEY": "",
    "EVALUATOR_API_KEY_ENV": "TEST_LLM_KEY",
    "EMBEDDINGS_API_KEY_ENV": "TEST_EMBED_KEY",
}


@pytest.fixture(autouse=True)
def _reset():
    reset_governance_dependencies()
    reset_database_bootstrap()
    yield
    reset_governance_dependencies()
    reset_database_bootstrap()


class TestStorageSelection:
    """Tests for get_storage backend selection."""

    def test_memory_without_database_url(self) -> None:
        with patch.dict(os.environ, CLEAN_ENV):
            storage = get_storage()

        assert isinstance(storage.submissions, SubmissionRepositoryStub)

    def test_postgres_with_database_url(self) -> None:
        env = {**CLEAN_ENV, "DATABASE_URL": "postgresql://app:secret@db:5432/scripture"}
        with patch.dict(os.environ, env):
            storage = get_storage()

        assert isinstance(storage.submissions, PostgresSubmissionRepository)

    def test_storage_is_singleton(self) -> None:
        with patch.dict(os.environ, CLEAN_ENV):
            assert get_storage() is get_storage()

    def test_reset_rebuilds(self) -> None:
        with patch.dict(os.environ, CLEAN_ENV):
            first = get_storage()
            reset_governance_dependencies()
            assert get_storage() is not first

    def test_services_share_outbox_and_storage(self) -> None:
        with patch.dict(os.environ, CLEAN_ENV):
            storage = get_storage()
            outbox = get_audit_outbox()
            engine = get_consensus_engine()
            revisions = get_revision_service()

        assert get_storage() is storage
        assert get_audit_outbox() is outbox
        assert get_consensus_engine() is engine
        assert get_revision_service() is revisions


class TestEvaluatorSelection:
    """Tests for get_evaluators and build_llm_evaluators."""

    def test_stubs_without_api_key(self) -> None:
        with patch.dict(os.environ, CLEAN_ENV):
            evaluators = get_evaluators()

        assert isinstance(evaluators.judgment, JudgmentServiceStub)

    def test_llm_with_api_key(self) -> None:
        with patch.dict(os.environ, {**CLEAN_ENV, "TEST_LLM_KEY": "k"}):
            evaluators = get_evaluators()

        assert isinstance(evaluators.judgment, LlmJudgmentService)
        assert isinstance(evaluators.similarity, SimilarityServiceStub)

    def test_embeddings_used_when_keyed(self) -> None:
        config = EvaluatorServiceConfig(
            api_key_env="TEST_LLM_KEY", embeddings_api_key_env="TEST_EMBED_KEY"
        )
        with patch.dict(os.environ, {"TEST_LLM_KEY": "k", "TEST_EMBED_KEY": "e"}):
            evaluators = build_llm_evaluators(config)

        assert isinstance(evaluators.similarity, EmbeddingSimilarityService)


class TestRateLimiterWiring:
    """Tests for get_rate_limiter."""

    def test_limits_from_environment(self) -> None:
        env = {
            **CLEAN_ENV,
            "SUBMISSION_RATE_LIMIT_PER_MINUTE": "3",
            "VOTE_RATE_LIMIT_PER_MINUTE": "9",
        }
        with patch.dict(os.environ, env):
            limiter = get_rate_limiter()

        assert isinstance(limiter, RateLimiterStub)
        assert limiter.get_limit("submission") == 3
        assert limiter.get_limit("vote") == 9

    def test_set_storage_overrides(self) -> None:
        with patch.dict(os.environ, CLEAN_ENV):
            storage = get_storage()
            reset_governance_dependencies()
            set_storage(storage)

            assert get_storage() is storage
