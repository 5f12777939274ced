"""
Note Repository
"""
from motor.motor_asyncio import AsyncIOMotorDatabase

from .base import BaseRepository
from ..models.note import Note


class NoteRepository(BaseRepository[Note]):
    """Repository for Note persistence."""

    def __init__(self, database: AsyncIOMotorDatabase):
        super().__init__(database, "notes", Note)
