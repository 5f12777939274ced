"""
Note Service
"""

from typing import Any, Dict

from src.core.views import NoteBoard, build_note_board
from src.errors import NotFoundError
from src.models.base import changed_fields, merged_input, validate_input
from src.models.note import Note
from src.utils.observability import log_business_event


class NoteService:

    def __init__(self, notes):
        self._notes = notes

    async def create(self, data: Dict[str, Any]) -> Note:
        note = validate_input(Note, data)
        created = await self._notes.create(note)

        log_business_event("note_created", created.id, pinned=created.is_pinned)
        return created

    async def get(self, note_id: str) -> Note:
        note = await self._notes.find_by_id(note_id)
        if note is None:
            raise NotFoundError("Note", note_id)
        return note

    async def update(self, note_id: str, data: Dict[str, Any]) -> Note:
        """
        Apply a partial update. Any change bumps updated_at, which moves the
        note to the top of its group.
        """
        current = await self.get(note_id)
        validated = validate_input(Note, merged_input(current, data))
        fields = changed_fields(current, validated, data)
        if not fields:
            return current

        return await self._write(note_id, fields)

    async def set_pin(self, note_id: str, pinned: bool) -> Note:
        await self.get(note_id)
        return await self._write(note_id, {"is_pinned": pinned})

    async def toggle_pin(self, note_id: str) -> Note:
        current = await self.get(note_id)
        return await self.set_pin(note_id, not current.is_pinned)

    async def delete(self, note_id: str) -> None:
        if not await self._notes.delete(note_id):
            raise NotFoundError("Note", note_id)

        log_business_event("note_deleted", note_id)

    async def board(self, query: str = "") -> NoteBoard:
        notes = await self._notes.list_all()
        return build_note_board(notes, query)

    async def _write(self, note_id: str, fields: Dict[str, Any]) -> Note:
        updated = await self._notes.update_fields(note_id, fields)
        if updated is None:
            raise NotFoundError("Note", note_id)
        return updated
