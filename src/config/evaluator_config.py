"""External evaluator service configuration.

The judgment, rewriting, placement-analysis and panel evaluators are served
by a messages-style language model endpoint; similarity is served by an
embeddings endpoint. Both are reached over HTTP.

Environment Variables:
- EVALUATOR_BASE_URL: Messages API base URL (default: https://api.anthropic.com)
- EVALUATOR_API_KEY_ENV: Name of the variable holding the API key
  (default: ANTHROPIC_API_KEY)
- EVALUATOR_JUDGMENT_MODEL: Model for scoring, panel and council calls
- EVALUATOR_WRITING_MODEL: Model for rewriting and placement analysis
- EVALUATOR_TIMEOUT_SECONDS: Per-call timeout (default: 30, min: 1, max: 300)
- EMBEDDINGS_BASE_URL: Embeddings API base URL (default: https://api.voyageai.com)
- EMBEDDINGS_API_KEY_ENV: Name of the variable holding the embeddings key
  (default: VOYAGE_API_KEY)
- EMBEDDINGS_MODEL: Embedding model (default: voyage-3)
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from src.config.governance_config import _get_float_env

DEFAULT_EVALUATOR_BASE_URL = "https://api.anthropic.com"
DEFAULT_JUDGMENT_MODEL = "claude-3-5-haiku-latest"
DEFAULT_WRITING_MODEL = "claude-sonnet-4-0"
DEFAULT_EMBEDDINGS_BASE_URL = "https://api.voyageai.com"
DEFAULT_EMBEDDINGS_MODEL = "voyage-3"

DEFAULT_TIMEOUT_SECONDS = 30.0
MIN_TIMEOUT_SECONDS = 1.0
MAX_TIMEOUT_SECONDS = 300.0


@dataclass(frozen=True)
class EvaluatorServiceConfig:
    """Connection settings for the external evaluator services.

    Attributes:
        base_url: Messages API base URL.
        api_key_env: Environment variable holding the messages API key.
        judgment_model: Model used for scoring and panel evaluations.
        writing_model: Model used for rewriting and placement analysis.
        timeout_seconds: Per-call timeout applied to every request.
        embeddings_base_url: Embeddings API base URL.
        embeddings_api_key_env: Environment variable holding the embeddings key.
        embeddings_model: Embedding model identifier.
        max_tokens: Response token ceiling for messages calls.
    """

    base_url: str = DEFAULT_EVALUATOR_BASE_URL
    api_key_env: str = "ANTHROPIC_API_KEY"
    judgment_model: str = DEFAULT_JUDGMENT_MODEL
    writing_model: str = DEFAULT_WRITING_MODEL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    embeddings_base_url: str = DEFAULT_EMBEDDINGS_BASE_URL
    embeddings_api_key_env: str = "VOYAGE_API_KEY"
    embeddings_model: str = DEFAULT_EMBEDDINGS_MODEL
    max_tokens: int = 1024

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not MIN_TIMEOUT_SECONDS <= self.timeout_seconds <= MAX_TIMEOUT_SECONDS:
            raise ValueError(
                f"timeout_seconds must be between {MIN_TIMEOUT_SECONDS} "
                f"and {MAX_TIMEOUT_SECONDS}, got {self.timeout_seconds}"
            )
        if self.max_tokens < 1:
            raise ValueError(f"max_tokens must be positive, got {self.max_tokens}")

    @property
    def api_key(self) -> str | None:
        """Messages API key read from the configured variable."""
        return os.environ.get(self.api_key_env)

    @property
    def embeddings_api_key(self) -> str | None:
        """Embeddings API key read from the configured variable."""
        return os.environ.get(self.embeddings_api_key_env)

    @classmethod
    def from_environment(cls) -> EvaluatorServiceConfig:
        """Create config from environment variables with defaults.

        Returns:
            EvaluatorServiceConfig with values from environment or defaults.
        """
        timeout = _get_float_env("EVALUATOR_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)
        timeout = max(MIN_TIMEOUT_SECONDS, min(timeout, MAX_TIMEOUT_SECONDS))
        return cls(
            base_url=os.environ.get("EVALUATOR_BASE_URL", DEFAULT_EVALUATOR_BASE_URL),
            api_key_env=os.environ.get("EVALUATOR_API_KEY_ENV", "ANTHROPIC_API_KEY"),
            judgment_model=os.environ.get(
                "EVALUATOR_JUDGMENT_MODEL", DEFAULT_JUDGMENT_MODEL
            ),
            writing_model=os.environ.get(
                "EVALUATOR_WRITING_MODEL", DEFAULT_WRITING_MODEL
            ),
            timeout_seconds=timeout,
            embeddings_base_url=os.environ.get(
                "EMBEDDINGS_BASE_URL", DEFAULT_EMBEDDINGS_BASE_URL
            ),
            embeddings_api_key_env=os.environ.get(
                "EMBEDDINGS_API_KEY_ENV", "VOYAGE_API_KEY"
            ),
            embeddings_model=os.environ.get(
                "EMBEDDINGS_MODEL", DEFAULT_EMBEDDINGS_MODEL
            ),
        )


DEFAULT_EVALUATOR_CONFIG = EvaluatorServiceConfig()
