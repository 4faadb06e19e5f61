"""FastAPI application factory for TagValidator."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from tagvalidator import __version__
from tagvalidator.api.deps import init_job_manager, reset_job_manager
from tagvalidator.api.middleware import RequestBodyLimitMiddleware, RequestTimingMiddleware
from tagvalidator.api.routers import jobs, languages, validation
from tagvalidator.api.schemas import HealthResponse
from tagvalidator.service.engine import ValidationEngine
from tagvalidator.service.jobs import JobManager
from tagvalidator.settings import Settings


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Start/stop the JobManager alongside the application."""
    settings: Settings = app.state.settings
    mgr = JobManager(
        engine=app.state.engine,
        ttl_seconds=settings.job_ttl_seconds,
        cleanup_interval=settings.job_cleanup_interval,
        max_workers=settings.job_workers,
    )
    mgr.start()
    init_job_manager(mgr, disable_job_list=settings.disable_job_list)
    try:
        yield
    finally:
        mgr.stop()
        reset_job_manager()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    if settings is None:
        settings = Settings()

    app = FastAPI(
        title="TagValidator",
        description="Finds unclosed, orphaned and mismatched tags in HTML/XML-like markup.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = ValidationEngine.from_settings(settings)

    # Middleware
    app.add_middleware(RequestBodyLimitMiddleware)
    app.add_middleware(RequestTimingMiddleware)

    app.include_router(validation.router, tags=["validation"])
    app.include_router(languages.router, tags=["reference"])

    # Background jobs
    app.include_router(jobs.router, prefix="/jobs", tags=["jobs"])

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", version=__version__)

    return app


def main() -> None:
    """Run the REST API server using settings from environment / .env file."""
    settings = Settings()

    logging.basicConfig(level=settings.log_level.upper())
    logger = logging.getLogger("tagvalidator.api")
    logger.info(
        "TagValidator API Server v%s starting (host=%s, port=%d)",
        __version__,
        settings.api_server_host,
        settings.effective_port,
    )

    uvicorn.run(
        "tagvalidator.api.app:create_app",
        factory=True,
        host=settings.api_server_host,
        port=settings.effective_port,
        log_level=settings.log_level.lower(),
    )
