"""
Task Repository
Task persistence. Completion fields are always written in one call.
"""
from motor.motor_asyncio import AsyncIOMotorDatabase

from .base import BaseRepository
from ..models.task import Task


class TaskRepository(BaseRepository[Task]):
    """Repository for Task persistence."""

    def __init__(self, database: AsyncIOMotorDatabase):
        """Initialize Task repository with database connection."""
        super().__init__(database, "tasks", Task)
