"""LoggingMixin shared by the pipeline services.

A service calls _init_logger() once in __init__ and _log_operation() at the
top of each public operation; every line it logs then carries the service
name, its pipeline component, the operation and the request correlation id.

Usage:
    class ScreeningService(LoggingMixin):
        def __init__(self, ...) -> None:
            ...
            self._init_logger(component="screening")

        async def screen(self, submission_id: UUID) -> ComplianceEvaluation:
            log = self._log_operation("screen", submission_id=str(submission_id))
            log.info("screening_started")
"""

import structlog

from src.infrastructure.observability.correlation import get_correlation_id


class LoggingMixin:
    """Structured logging for services.

    Attributes:
        _log: Logger bound with service and component.
    """

    _log: structlog.BoundLogger

    def _init_logger(self, component: str = "governance") -> None:
        """Bind the service class name and its pipeline component."""
        self._log = structlog.get_logger().bind(
            service=self.__class__.__name__,
            component=component,
        )

    def _log_operation(
        self,
        operation: str,
        **context: object,
    ) -> structlog.BoundLogger:
        """Logger for one operation, with the current correlation id.

        Args:
            operation: Operation name, e.g. "cast_vote".
            **context: Extra fields such as ids of the records involved.
        """
        return self._log.bind(
            operation=operation,
            correlation_id=get_correlation_id(),
            **context,
        )
