import datetime as dt
from enum import StrEnum
from typing import Optional
from pydantic import field_validator, model_validator
from src.models.base import MongoBaseModel


class TaskPriority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskCategory(StrEnum):
    """Known category keys. The field itself accepts any key."""
    FOLLOW_UP = "followUp"
    EMAIL = "email"
    CALL = "call"
    MEETING = "meeting"
    PROPOSAL = "proposal"
    REMINDER = "reminder"


class Task(MongoBaseModel):
    """
    A to-do item, usually captured by voice.

    related_contact_name is a snapshot of the contact's name taken when the
    task was linked. It is not kept in sync with the contact and survives the
    contact's deletion.
    """
    title: str
    description: Optional[str] = None
    due_date: Optional[dt.datetime] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    category: str = TaskCategory.REMINDER.value
    is_completed: bool = False
    completed_at: Optional[dt.datetime] = None
    related_contact_id: Optional[str] = None
    related_contact_name: Optional[str] = None

    @field_validator("title")
    @classmethod
    def require_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @model_validator(mode="after")
    def completion_consistent(self) -> "Task":
        # completed_at is present iff is_completed
        if self.is_completed != (self.completed_at is not None):
            raise ValueError("completed_at must be set exactly when is_completed is true")
        return self


def completion_fields(completed: bool, now: dt.datetime) -> dict:
    """The two completion fields, always written together."""
    return {
        "is_completed": completed,
        "completed_at": now if completed else None,
    }
