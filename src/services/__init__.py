"""Services package."""
from src.services.container import Services, build_services
from src.services.contacts import ContactDetail, ContactService
from src.services.dashboard import DashboardOverview, DashboardService
from src.services.enrichment_manager import EnrichmentLifecycleManager, EnrichmentTicket
from src.services.enrichment_provider import (
    EnrichmentProvider,
    HttpEnrichmentProvider,
    UnconfiguredEnrichmentProvider,
    get_enrichment_provider,
    parse_facts,
)
from src.services.enrichment_worker import EnrichmentWorker
from src.services.notes import NoteService
from src.services.tasks import TaskService
from src.services.voice_log import VoiceLogService

__all__ = [
    "Services",
    "build_services",
    "ContactDetail",
    "ContactService",
    "DashboardOverview",
    "DashboardService",
    "EnrichmentLifecycleManager",
    "EnrichmentTicket",
    "EnrichmentProvider",
    "HttpEnrichmentProvider",
    "UnconfiguredEnrichmentProvider",
    "get_enrichment_provider",
    "parse_facts",
    "EnrichmentWorker",
    "NoteService",
    "TaskService",
    "VoiceLogService",
]
