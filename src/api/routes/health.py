"""
Health and Readiness Endpoints

Kubernetes-compatible health probes for load balancers and orchestration.
"""
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from loguru import logger

from src.config import settings
from src.repositories import db_manager

router = APIRouter(tags=["Health"])

# API version - single source of truth
API_VERSION = "1.0.0"


@router.get("/health")
async def health_check():
    """
    Basic health check endpoint.

    Returns 200 if service is running.
    Used by load balancers and monitoring systems.
    """
    return {
        "status": "healthy",
        "service": "voice-crm",
        "version": API_VERSION
    }


@router.get("/ready")
async def readiness_check(request: Request):
    """
    Readiness probe - checks if service can handle requests.

    Verifies:
    - Services are initialized
    - MongoDB connection is active (mongodb backend only)
    - Enrichment worker state

    Returns 200 if ready, 503 if not ready.
    """
    services = getattr(request.app.state, "services", None)
    if services is None:
        return JSONResponse(
            status_code=503,
            content={
                "status": "not_ready",
                "reason": "Services not initialized"
            }
        )

    worker = getattr(request.app.state, "enrichment_worker", None)
    storage = "memory"

    if settings.storage_backend == "mongodb":
        try:
            await db_manager.client.admin.command("ping")
            storage = "connected"
        except Exception as e:
            logger.error(f"Readiness check failed: {e}")
            return JSONResponse(
                status_code=503,
                content={
                    "status": "not_ready",
                    "reason": str(e)
                }
            )

    return {
        "status": "ready",
        "storage": storage,
        "enrichment_worker": "running" if worker and worker.is_running else "stopped"
    }


@router.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "service": "Voice CRM API",
        "version": API_VERSION,
        "endpoints": {
            "health": "/health",
            "ready": "/ready",
            "contacts": "/contacts",
            "tasks": "/tasks",
            "notes": "/notes",
            "voice_logs": "/voice-logs",
            "dashboard": "/dashboard"
        }
    }
