"""
Repositories Layer
Data persistence and query operations for contacts, tasks, notes,
voice logs and enrichments.
"""
from .connection import db_manager, get_database, DatabaseManager
from .base import BaseRepository
from .contacts import ContactRepository
from .tasks import TaskRepository
from .notes import NoteRepository
from .voice_interactions import VoiceInteractionRepository
from .enrichments import EnrichmentRepository
from .memory import InMemoryRepository, InMemoryEnrichmentRepository, InMemoryVoiceInteractionRepository
from .registry import Repositories, mongo_repositories, memory_repositories

__all__ = [
    "db_manager",
    "get_database",
    "DatabaseManager",
    "BaseRepository",
    "ContactRepository",
    "TaskRepository",
    "NoteRepository",
    "VoiceInteractionRepository",
    "EnrichmentRepository",
    "InMemoryRepository",
    "InMemoryEnrichmentRepository",
    "InMemoryVoiceInteractionRepository",
    "Repositories",
    "mongo_repositories",
    "memory_repositories",
]
