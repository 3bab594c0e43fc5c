"""Correlation ID FastAPI dependency.

LoggingMiddleware sets the correlation ID for every request; this
dependency exposes it to route handlers and covers apps mounted without
the middleware.

Usage:
    from fastapi import Depends
    from src.api.dependencies.correlation import get_correlation_id_header

    @router.get("/example")
    async def example_endpoint(
        correlation_id: str = Depends(get_correlation_id_header)
    ) -> dict:
        return {"correlation_id": correlation_id}
"""

from fastapi import Header

from src.infrastructure.observability.correlation import (
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
)


async def get_correlation_id_header(
    x_correlation_id: str | None = Header(default=None, alias="X-Correlation-ID"),
) -> str:
    """Get the request's correlation ID, creating one if needed."""
    existing = get_correlation_id()
    if existing:
        return existing

    correlation_id = x_correlation_id or generate_correlation_id()
    set_correlation_id(correlation_id)
    return correlation_id
