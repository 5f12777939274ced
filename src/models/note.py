from src.models.base import MongoBaseModel


class Note(MongoBaseModel):
    title: str
    content: str
    color: str = "yellow"
    is_pinned: bool = False
