"""
Contact Repository
Contact persistence and listing.
"""
from motor.motor_asyncio import AsyncIOMotorDatabase

from .base import BaseRepository
from ..models.contact import Contact


class ContactRepository(BaseRepository[Contact]):
    """Repository for Contact persistence."""

    def __init__(self, database: AsyncIOMotorDatabase):
        """Initialize Contact repository with database connection."""
        super().__init__(database, "contacts", Contact)
