"""API middleware: request logging and per-actor rate limits."""

from src.api.middleware.logging_middleware import CORRELATION_HEADER, LoggingMiddleware
from src.api.middleware.rate_limiter import enforce_rate_limit

__all__: list[str] = ["CORRELATION_HEADER", "LoggingMiddleware", "enforce_rate_limit"]
