import datetime as dt
from typing import List, Optional
from pydantic import Field, computed_field, field_validator
from src.models.base import MongoBaseModel


class Contact(MongoBaseModel):
    """
    A person in the relationship graph.
    Owns at most one ContactEnrichment, created when the contact is.
    """
    first_name: str
    last_name: str
    company: Optional[str] = None
    role: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    linkedin: Optional[str] = None
    notes: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    avatar_color: str = "cyan"
    last_contact_date: Optional[dt.datetime] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def require_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("tags")
    @classmethod
    def dedupe_tags(cls, tags: List[str]) -> List[str]:
        # Tags are a set; keep first-seen order for stable display
        seen: List[str] = []
        for tag in tags:
            tag = tag.strip()
            if tag and tag not in seen:
                seen.append(tag)
        return seen

    @computed_field
    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
