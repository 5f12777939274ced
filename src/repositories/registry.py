"""
Repository Registry
Bundles one repository per entity so services share a single backend.
"""
from dataclasses import dataclass
from typing import Any
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..models.contact import Contact
from ..models.note import Note
from ..models.task import Task
from .contacts import ContactRepository
from .enrichments import EnrichmentRepository
from .memory import (
    InMemoryEnrichmentRepository,
    InMemoryRepository,
    InMemoryVoiceInteractionRepository,
)
from .notes import NoteRepository
from .tasks import TaskRepository
from .voice_interactions import VoiceInteractionRepository


@dataclass
class Repositories:
    """Either all MongoDB-backed or all in-memory; never mixed."""
    contacts: Any
    tasks: Any
    notes: Any
    voice_logs: Any
    enrichments: Any


def mongo_repositories(database: AsyncIOMotorDatabase) -> Repositories:
    return Repositories(
        contacts=ContactRepository(database),
        tasks=TaskRepository(database),
        notes=NoteRepository(database),
        voice_logs=VoiceInteractionRepository(database),
        enrichments=EnrichmentRepository(database),
    )


def memory_repositories() -> Repositories:
    return Repositories(
        contacts=InMemoryRepository("contacts", Contact),
        tasks=InMemoryRepository("tasks", Task),
        notes=InMemoryRepository("notes", Note),
        voice_logs=InMemoryVoiceInteractionRepository(),
        enrichments=InMemoryEnrichmentRepository(),
    )
