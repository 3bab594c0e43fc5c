"""HTTP adapters for the external evaluator services."""

from src.infrastructure.adapters.evaluators.embedding_similarity import (
    EmbeddingSimilarityService,
    cosine_similarity,
)
from src.infrastructure.adapters.evaluators.llm_evaluators import (
    LlmJudgmentService,
    LlmPanelEvaluator,
    LlmPlacementAnalyzer,
    LlmRewritingService,
)
from src.infrastructure.adapters.evaluators.messages_client import (
    MessagesClient,
    parse_reply,
)

__all__: list[str] = [
    "EmbeddingSimilarityService",
    "LlmJudgmentService",
    "LlmPanelEvaluator",
    "LlmPlacementAnalyzer",
    "LlmRewritingService",
    "MessagesClient",
    "cosine_similarity",
    "parse_reply",
]
