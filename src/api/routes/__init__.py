"""
API Routes

Modular route definitions for the Voice CRM API.
"""
from src.api.routes.health import router as health_router
from src.api.routes.contacts import router as contacts_router
from src.api.routes.tasks import router as tasks_router
from src.api.routes.notes import router as notes_router
from src.api.routes.voice_logs import router as voice_logs_router
from src.api.routes.dashboard import router as dashboard_router

__all__ = [
    "health_router",
    "contacts_router",
    "tasks_router",
    "notes_router",
    "voice_logs_router",
    "dashboard_router",
]
