"""
Voice Interaction Repository
Append-only log of transcribed utterances and replies.
"""
from motor.motor_asyncio import AsyncIOMotorDatabase

from .base import BaseRepository
from ..models.voice_interaction import VoiceInteraction


class VoiceInteractionRepository(BaseRepository[VoiceInteraction]):
    """
    Repository for the voice log.
    Updates are refused; records are only inserted, read and deleted.
    """

    append_only = True

    def __init__(self, database: AsyncIOMotorDatabase):
        """Initialize voice log repository with database connection."""
        super().__init__(database, "voice_logs", VoiceInteraction)
