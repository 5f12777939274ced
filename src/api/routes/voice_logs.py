"""
Voice Log Endpoints

Append-only: exchanges can be recorded and read, never edited.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import get_voice_log_service
from src.api.models.requests import VoiceInteractionCreate
from src.services.voice_log import DEFAULT_HISTORY_LIMIT, VoiceLogService

router = APIRouter(prefix="/voice-logs", tags=["Voice Log"])


@router.get("")
async def voice_history(
    q: str = "",
    intent: Optional[str] = None,
    limit: int = Query(DEFAULT_HISTORY_LIMIT, ge=1, le=500),
    service: VoiceLogService = Depends(get_voice_log_service)
):
    """Recent exchanges grouped by day (Today, Yesterday, then dates)."""
    view = await service.view(query=q, intent=intent, limit=limit)
    return view.model_dump(mode="json")


@router.post("", status_code=status.HTTP_201_CREATED)
async def record_interaction(
    body: VoiceInteractionCreate,
    service: VoiceLogService = Depends(get_voice_log_service)
):
    interaction = await service.record(body.sent_fields())
    return interaction.model_dump(mode="json")
