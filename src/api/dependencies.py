"""
FastAPI Dependencies

Request-scoped access to the services wired up in the application lifespan.
"""

from fastapi import Depends, HTTPException, Request, status

from src.services.container import Services
from src.services.contacts import ContactService
from src.services.dashboard import DashboardService
from src.services.enrichment_manager import EnrichmentLifecycleManager
from src.services.notes import NoteService
from src.services.tasks import TaskService
from src.services.voice_log import VoiceLogService


def get_services(request: Request) -> Services:
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Services not initialized"
        )
    return services


def get_contact_service(services: Services = Depends(get_services)) -> ContactService:
    return services.contacts


def get_task_service(services: Services = Depends(get_services)) -> TaskService:
    return services.tasks


def get_note_service(services: Services = Depends(get_services)) -> NoteService:
    return services.notes


def get_voice_log_service(services: Services = Depends(get_services)) -> VoiceLogService:
    return services.voice_log


def get_dashboard_service(services: Services = Depends(get_services)) -> DashboardService:
    return services.dashboard


def get_enrichment_manager(services: Services = Depends(get_services)) -> EnrichmentLifecycleManager:
    return services.enrichment
