"""External evaluator service errors.

Judgment, rewriting, similarity and placement-analysis failures are
reported distinctly from a low score so that each caller can apply its
own fallback.
"""

from __future__ import annotations

from src.domain.exceptions import GovernanceError


class ExternalServiceError(GovernanceError):
    """Base class for external evaluator failures.

    Attributes:
        service: Name of the failing service.
    """

    def __init__(self, service: str, message: str) -> None:
        self.service = service
        super().__init__(f"{service}: {message}")


class EvaluatorUnavailableError(ExternalServiceError):
    """Raised on transport failure, timeout or a non-success status.

    Attributes:
        status_code: HTTP status when one was received, else None.
    """

    def __init__(
        self, service: str, message: str, status_code: int | None = None
    ) -> None:
        self.status_code = status_code
        super().__init__(service, message)


class EvaluatorResponseError(ExternalServiceError):
    """Raised when a response does not match the expected schema.

    Attributes:
        raw_response: The text that failed validation.
    """

    def __init__(self, service: str, message: str, raw_response: str = "") -> None:
        self.raw_response = raw_response
        super().__init__(service, message)
