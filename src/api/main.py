"""
FastAPI Application

Main entry point for the Voice CRM API.
Handles application lifecycle, error mapping and router mounting.
"""
import asyncio
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from loguru import logger

from src.config import settings
from src.errors import ConflictError, NotFoundError, ValidationError
from src.repositories import db_manager, memory_repositories, mongo_repositories
from src.services.container import Services, build_services
from src.utils.observability import configure_logging
from src.api.routes import (
    contacts_router,
    dashboard_router,
    health_router,
    notes_router,
    tasks_router,
    voice_logs_router,
)


async def _build_default_services() -> Services:
    if settings.storage_backend == "memory":
        logger.warning("Using in-memory storage; data will not survive a restart")
        return build_services(memory_repositories())

    await db_manager.connect()
    await db_manager.create_indexes()
    return build_services(mongo_repositories(db_manager.database))


def create_app(services: Optional[Services] = None, start_worker: Optional[bool] = None) -> FastAPI:
    """
    Build the application.

    Args:
        services: Pre-wired services (tests); built from settings when None
        start_worker: Run the enrichment worker; defaults to the setting
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Manage application lifecycle: startup and shutdown events.

        Startup:
        - Connect storage and build services
        - Start the background enrichment worker

        Shutdown:
        - Stop the worker gracefully
        - Disconnect from MongoDB
        """
        configure_logging()
        logger.info("Starting Voice CRM API server...")

        app.state.services = services or await _build_default_services()

        run_worker = settings.enrichment_worker_enabled if start_worker is None else start_worker
        worker = app.state.services.enrichment_worker()
        app.state.enrichment_worker = worker
        worker_task = asyncio.create_task(worker.start()) if run_worker else None

        logger.info("API server ready")

        yield

        # Shutdown
        logger.info("Shutting down API server...")

        await worker.stop()
        if worker_task and not worker_task.done():
            worker_task.cancel()
            try:
                await worker_task
            except asyncio.CancelledError:
                logger.info("Stopped enrichment worker")

        if services is None and settings.storage_backend == "mongodb":
            await db_manager.disconnect()
        logger.info("Shutdown complete")

    app = FastAPI(
        title="Voice CRM API",
        description="Contacts, tasks, notes and voice log with background contact enrichment",
        version="1.0.0",
        lifespan=lifespan
    )

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})

    @app.exception_handler(ValidationError)
    async def validation_handler(request: Request, exc: ValidationError):
        return JSONResponse(
            status_code=422,
            content={"detail": str(exc), "field": exc.field}
        )

    @app.exception_handler(ConflictError)
    async def conflict_handler(request: Request, exc: ConflictError):
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})

    # Mount routers
    app.include_router(health_router)
    app.include_router(contacts_router)
    app.include_router(tasks_router)
    app.include_router(notes_router)
    app.include_router(voice_logs_router)
    app.include_router(dashboard_router)

    return app


app = create_app()
