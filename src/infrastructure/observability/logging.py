"""Structured logging configuration with structlog.

Production renders one JSON object per line; any other environment uses
the colored console renderer. Every entry carries the log level, an ISO
timestamp and, inside a request, the correlation id.

Environment Variables:
- LOG_LEVEL: Minimum level (default: INFO)
- APP_ENV: "production" selects JSON output (default: development)

Usage:
    from src.infrastructure.observability import configure_structlog

    configure_structlog()                          # from APP_ENV
    configure_structlog(environment="production")  # force JSON
"""

import logging
import os
from typing import cast

import structlog
from structlog.typing import Processor

from src.infrastructure.observability.correlation import correlation_id_processor

LOG_LEVEL_ENV = "LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"
ENVIRONMENT_ENV = "APP_ENV"
DEFAULT_ENVIRONMENT = "development"


def _get_log_level() -> int:
    level_name = os.getenv(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).upper()
    return getattr(logging, level_name, logging.INFO)


def configure_structlog(environment: str | None = None) -> None:
    """Configure structlog once at startup.

    Args:
        environment: "production" for JSON output, anything else for
            console output. Read from APP_ENV when omitted.
    """
    if environment is None:
        environment = os.getenv(ENVIRONMENT_ENV, DEFAULT_ENVIRONMENT)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        cast(Processor, correlation_id_processor),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if environment == "production":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(_get_log_level()),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
