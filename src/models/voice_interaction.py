from enum import StrEnum
from src.models.base import MongoBaseModel


class VoiceIntent(StrEnum):
    """Intents produced by the voice classifier. The log accepts any value."""
    CREATE_CONTACT = "create_contact"
    CREATE_TASK = "create_task"
    CREATE_NOTE = "create_note"
    QUERY = "query"
    GREETING = "greeting"
    ERROR = "error"


class VoiceInteraction(MongoBaseModel):
    """
    One utterance and the assistant's reply.
    Append-only: never updated after it is recorded.
    """
    transcription: str
    intent: str
    ai_response: str
