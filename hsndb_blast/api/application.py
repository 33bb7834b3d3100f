"""FastAPI application factory for the BLAST compute service.

This module composes routers under the configured prefix and owns the
service lifespan: protein mapping warm-up, periodic job cleanup and
cancellation of running jobs on shutdown.
"""

from __future__ import annotations

import asyncio
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from hsndb_blast.compute import BlastDatabaseManager, BlastRunner
from hsndb_blast.config import AppSettings
from hsndb_blast.db import DatabaseHealthPort

from .routers import api_create_blast_router, api_create_database_router, api_create_health_router

_LOGGER = structlog.get_logger(__name__)


async def api_run_job_cleanup_loop(blast_runner: BlastRunner, interval_seconds: float, max_age_seconds: float) -> None:
    """Remove expired jobs every `interval_seconds` until cancelled."""

    while True:
        await asyncio.sleep(interval_seconds)
        blast_runner.compute_cleanup_expired(max_age_seconds)


def create_api_application(
    settings: AppSettings,
    blast_runner: BlastRunner,
    database_manager: BlastDatabaseManager,
    db_health_service: DatabaseHealthPort | None = None,
) -> FastAPI:
    """Create the FastAPI application instance for the compute service.

    Args:
        settings: Validated application settings.
        blast_runner: Runner executing BLAST jobs.
        database_manager: BLAST database manager for info endpoints.
        db_health_service: Optional record store health service.

    Returns:
        FastAPI: Framework application instance with all routers mounted.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    @asynccontextmanager
    async def api_lifespan(_: FastAPI) -> AsyncIterator[None]:
        mappings_loaded = await blast_runner.compute_runner_initialize()
        _LOGGER.info(
            "compute_service_started",
            environment=settings.environment_name,
            blast_db_path=settings.blast_db_path,
            protein_mappings_loaded=mappings_loaded,
        )
        cleanup_task = asyncio.get_running_loop().create_task(
            api_run_job_cleanup_loop(
                blast_runner=blast_runner,
                interval_seconds=settings.job_cleanup_interval_seconds,
                max_age_seconds=settings.job_max_age_seconds,
            )
        )
        try:
            yield
        finally:
            cleanup_task.cancel()
            await asyncio.gather(cleanup_task, return_exceptions=True)
            await blast_runner.compute_runner_shutdown()
            _LOGGER.info("compute_service_stopped")

    application = FastAPI(title="HSNDB BLAST", version="1.0.0", lifespan=api_lifespan)

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @application.middleware("http")
    async def api_log_request(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4())[:8])
        structlog.contextvars.bind_contextvars(request_id=request_id)
        try:
            response = await call_next(request)
            _LOGGER.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
            )
            return response
        finally:
            structlog.contextvars.unbind_contextvars("request_id")

    @application.exception_handler(StarletteHTTPException)
    async def api_http_error(_: Request, error: StarletteHTTPException) -> JSONResponse:
        message = "Endpoint not found" if error.status_code == 404 else str(error.detail)
        return JSONResponse(content={"error": message}, status_code=error.status_code)

    @application.exception_handler(Exception)
    async def api_unhandled_error(request: Request, error: Exception) -> JSONResponse:
        _LOGGER.exception("unhandled_request_error", path=request.url.path)
        return JSONResponse(content={"error": "Internal server error"}, status_code=500)

    application.include_router(
        api_create_health_router(settings=settings, db_health_service=db_health_service),
        prefix=settings.api_prefix,
    )
    application.include_router(
        api_create_database_router(database_manager=database_manager),
        prefix=settings.api_prefix,
    )
    application.include_router(
        api_create_blast_router(settings=settings, blast_runner=blast_runner),
        prefix=settings.api_prefix,
    )

    return application
