"""
Voice Log Service

Records each voice exchange and builds the grouped history view. Entries are
immutable once recorded; the service has no update path.
"""

import datetime as dt
from typing import Any, Callable, Dict, Optional

from src.config import get_settings
from src.core.views import VoiceLogView, build_voice_log
from src.models.base import utc_now, validate_input
from src.models.voice_interaction import VoiceInteraction, VoiceIntent
from src.utils.observability import logger

# History screen shows the most recent exchanges only
DEFAULT_HISTORY_LIMIT = 50


class VoiceLogService:

    def __init__(self, voice_logs, clock: Optional[Callable[[], dt.datetime]] = None):
        self._voice_logs = voice_logs
        self._clock = clock or utc_now

    async def record(self, data: Dict[str, Any]) -> VoiceInteraction:
        """
        Append one exchange to the log.

        Raises:
            ValidationError: If transcription, intent or response is missing
        """
        interaction = validate_input(VoiceInteraction, data)
        created = await self._voice_logs.create(interaction)

        if created.intent not in set(VoiceIntent):
            logger.info(f"Recorded voice interaction with unrecognised intent '{created.intent}'")

        logger.debug(
            f"Recorded voice interaction {created.id}",
            extra={"intent": created.intent}
        )
        return created

    async def view(
        self,
        query: str = "",
        intent: Optional[str] = None,
        limit: int = DEFAULT_HISTORY_LIMIT,
        now: Optional[dt.datetime] = None,
    ) -> VoiceLogView:
        interactions = await self._voice_logs.find_many(
            {}, limit=limit, sort=[("created_at", -1)]
        )
        return build_voice_log(
            interactions,
            query=query,
            intent=intent or None,
            now=now or self._clock(),
            tz=get_settings().display_timezone,
        )

    async def count(self) -> int:
        return await self._voice_logs.count()
