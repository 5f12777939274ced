"""
Pydantic models for API request bodies.

Create bodies declare what a new record needs; update bodies are fully
optional and only the keys actually sent are applied.
"""
import datetime as dt
from pydantic import BaseModel, ConfigDict, Field
from typing import ClassVar, List, Optional, Tuple

from src.models.task import TaskPriority


class RequestModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    # Fields with a non-null domain default; an explicit null means "not sent"
    defaulted: ClassVar[Tuple[str, ...]] = ()

    def sent_fields(self) -> dict:
        return {
            key: value for key, value in self.model_dump(exclude_unset=True).items()
            if value is not None or key not in self.defaulted
        }


class ContactCreate(RequestModel):
    defaulted = ("tags", "avatar_color")

    first_name: str = Field(..., description="Given name")
    last_name: str = Field(..., description="Family name")
    company: Optional[str] = None
    role: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    linkedin: Optional[str] = Field(None, description="LinkedIn profile URL")
    notes: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    avatar_color: Optional[str] = None


class ContactUpdate(RequestModel):
    defaulted = ("tags", "avatar_color")

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    company: Optional[str] = None
    role: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    linkedin: Optional[str] = None
    notes: Optional[str] = None
    tags: Optional[List[str]] = None
    avatar_color: Optional[str] = None


class ContactTouch(RequestModel):
    when: Optional[dt.datetime] = Field(None, description="Interaction time (defaults to now)")


class TaskCreate(RequestModel):
    defaulted = ("priority", "is_completed")

    title: str
    description: Optional[str] = None
    due_date: Optional[dt.datetime] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    category: Optional[str] = Field(None, description="Category key, e.g. followUp or meeting")
    is_completed: bool = False
    related_contact_id: Optional[str] = None


class TaskUpdate(RequestModel):
    defaulted = ("priority", "is_completed")

    title: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[dt.datetime] = None
    priority: Optional[TaskPriority] = None
    category: Optional[str] = None
    is_completed: Optional[bool] = None
    related_contact_id: Optional[str] = None


class CompletionUpdate(RequestModel):
    is_completed: bool


class NoteCreate(RequestModel):
    defaulted = ("color", "is_pinned")

    title: str
    content: str
    color: Optional[str] = None
    is_pinned: bool = False


class NoteUpdate(RequestModel):
    defaulted = ("color", "is_pinned")

    title: Optional[str] = None
    content: Optional[str] = None
    color: Optional[str] = None
    is_pinned: Optional[bool] = None


class PinUpdate(RequestModel):
    is_pinned: bool


class VoiceInteractionCreate(RequestModel):
    transcription: str = Field(..., description="What the user said")
    intent: str = Field(..., description="Classifier intent, e.g. create_task")
    ai_response: str = Field(..., description="What the assistant replied")
