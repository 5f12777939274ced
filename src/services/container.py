"""
Service Container

Wires every service to one repository set, one provider and one clock.
"""

import datetime as dt
from dataclasses import dataclass
from typing import Callable, Optional

from src.config import get_settings
from src.repositories.registry import Repositories
from src.services.contacts import ContactService
from src.services.dashboard import DashboardService
from src.services.enrichment_manager import EnrichmentLifecycleManager
from src.services.enrichment_provider import EnrichmentProvider, get_enrichment_provider
from src.services.enrichment_worker import EnrichmentWorker
from src.services.notes import NoteService
from src.services.tasks import TaskService
from src.services.voice_log import VoiceLogService


@dataclass
class Services:
    repositories: Repositories
    enrichment: EnrichmentLifecycleManager
    contacts: ContactService
    tasks: TaskService
    notes: NoteService
    voice_log: VoiceLogService
    dashboard: DashboardService

    def enrichment_worker(self) -> EnrichmentWorker:
        settings = get_settings()
        return EnrichmentWorker(
            self.enrichment,
            max_concurrent=settings.enrichment_max_concurrent,
            poll_interval=settings.enrichment_poll_interval_seconds,
            batch_size=settings.enrichment_batch_size,
        )


def build_services(
    repositories: Repositories,
    provider: Optional[EnrichmentProvider] = None,
    clock: Optional[Callable[[], dt.datetime]] = None,
) -> Services:
    enrichment = EnrichmentLifecycleManager(
        repositories.enrichments,
        repositories.contacts,
        provider or get_enrichment_provider(),
        clock=clock,
    )
    return Services(
        repositories=repositories,
        enrichment=enrichment,
        contacts=ContactService(repositories.contacts, repositories.tasks, enrichment, clock=clock),
        tasks=TaskService(repositories.tasks, repositories.contacts, clock=clock),
        notes=NoteService(repositories.notes),
        voice_log=VoiceLogService(repositories.voice_logs, clock=clock),
        dashboard=DashboardService(repositories, clock=clock),
    )
