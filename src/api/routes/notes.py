"""
Note Endpoints
"""
from fastapi import APIRouter, Depends, Response, status

from src.api.dependencies import get_note_service
from src.api.models.requests import NoteCreate, NoteUpdate, PinUpdate
from src.services.notes import NoteService

router = APIRouter(prefix="/notes", tags=["Notes"])


@router.get("")
async def note_board(q: str = "", service: NoteService = Depends(get_note_service)):
    """Pinned and unpinned groups, each most recently updated first."""
    board = await service.board(q)
    return board.model_dump(mode="json")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_note(body: NoteCreate, service: NoteService = Depends(get_note_service)):
    note = await service.create(body.sent_fields())
    return note.model_dump(mode="json")


@router.get("/{note_id}")
async def get_note(note_id: str, service: NoteService = Depends(get_note_service)):
    note = await service.get(note_id)
    return note.model_dump(mode="json")


@router.patch("/{note_id}")
async def update_note(note_id: str, body: NoteUpdate, service: NoteService = Depends(get_note_service)):
    note = await service.update(note_id, body.sent_fields())
    return note.model_dump(mode="json")


@router.post("/{note_id}/pin/toggle")
async def toggle_pin(note_id: str, service: NoteService = Depends(get_note_service)):
    note = await service.toggle_pin(note_id)
    return note.model_dump(mode="json")


@router.put("/{note_id}/pin")
async def set_pin(note_id: str, body: PinUpdate, service: NoteService = Depends(get_note_service)):
    note = await service.set_pin(note_id, body.is_pinned)
    return note.model_dump(mode="json")


@router.delete("/{note_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_note(note_id: str, service: NoteService = Depends(get_note_service)):
    await service.delete(note_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
