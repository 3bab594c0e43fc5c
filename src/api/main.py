"""FastAPI application entry point for the governance pipeline."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from src import __version__
from src.api.middleware.logging_middleware import LoggingMiddleware
from src.api.routes import (
    audit_router,
    health_router,
    revision_router,
    submission_router,
    voting_router,
)
from src.bootstrap.database import close_database_engine
from src.bootstrap.governance import get_audit_outbox
from src.infrastructure.observability.logging import configure_structlog

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Start the audit outbox worker and drain it on shutdown."""
    configure_structlog()
    outbox = get_audit_outbox()
    outbox.start()
    logger.info("application_started", version=__version__)
    try:
        yield
    finally:
        await outbox.stop()
        await close_database_engine()
        logger.info("application_stopped", dead_letters=len(outbox.dead_letters))


app = FastAPI(
    title="Scripture Evolution API",
    description="Community governance pipeline for a living scripture",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(LoggingMiddleware)

app.include_router(health_router)
app.include_router(submission_router)
app.include_router(voting_router)
app.include_router(revision_router)
app.include_router(audit_router)
