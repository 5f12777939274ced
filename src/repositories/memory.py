"""
In-Memory Repositories

Dictionary-backed implementation of the repository contract for testing and
single-instance development. Data is lost on restart.

Suitable for:
- Testing
- Local development without MongoDB

Not suitable for:
- Multi-instance deployments
- Anything that must survive a restart
"""
import asyncio
import datetime as dt
import uuid
from typing import Any, Dict, Generic, List, Optional, Type

from src.models.enrichment import ContactEnrichment, EnrichmentStatus
from src.models.voice_interaction import VoiceInteraction
from src.repositories.base import T, SortSpec
from src.utils.observability import logger


def _sort_value(value: Any) -> tuple:
    # MongoDB orders null before any value
    return (value is not None, value)


class InMemoryRepository(Generic[T]):
    """
    Same contract as BaseRepository, stored in a dict keyed by id.

    Records are stored as model copies so callers cannot mutate storage
    without going through the repository.
    """

    append_only: bool = False

    def __init__(self, collection_name: str, model_class: Type[T]):
        self.collection_name = collection_name
        self.model_class = model_class
        self._records: Dict[str, T] = {}
        self._lock = asyncio.Lock()

    async def create(self, document: T) -> T:
        async with self._lock:
            now = dt.datetime.now(dt.UTC)
            document.created_at = now
            document.updated_at = now
            document.id = uuid.uuid4().hex
            self._records[document.id] = document.model_copy(deep=True)

        logger.debug(
            f"Created document in {self.collection_name}",
            extra={"document_id": document.id}
        )
        return document

    async def find_by_id(self, document_id: str) -> Optional[T]:
        record = self._records.get(document_id)
        return record.model_copy(deep=True) if record else None

    async def find_one(self, filter_dict: Dict[str, Any]) -> Optional[T]:
        matches = await self.find_many(filter_dict, limit=1)
        return matches[0] if matches else None

    async def find_many(
        self,
        filter_dict: Dict[str, Any],
        limit: int = 100,
        skip: int = 0,
        sort: Optional[SortSpec] = None
    ) -> List[T]:
        """Equality filters only; richer queries live on subclasses."""
        records = [
            record for record in self._records.values()
            if all(getattr(record, key, None) == value for key, value in filter_dict.items())
        ]
        records = self._sorted(records, sort)[skip:]
        if limit:
            records = records[:limit]
        return [record.model_copy(deep=True) for record in records]

    async def list_all(self, sort: Optional[SortSpec] = None) -> List[T]:
        return await self.find_many({}, limit=0, sort=sort)

    async def update_fields(self, document_id: str, fields: Dict[str, Any]) -> Optional[T]:
        return await self._conditional_set({}, document_id, fields)

    async def delete(self, document_id: str) -> bool:
        async with self._lock:
            removed = self._records.pop(document_id, None)

        if removed is not None:
            logger.debug(
                f"Deleted document from {self.collection_name}",
                extra={"document_id": document_id}
            )
            return True

        return False

    async def count(self, filter_dict: Optional[Dict[str, Any]] = None) -> int:
        return len(await self.find_many(filter_dict or {}, limit=0))

    async def _conditional_set(
        self,
        conditions: Dict[str, Any],
        document_id: str,
        fields: Dict[str, Any],
    ) -> Optional[T]:
        """Check conditions and write in one critical section."""
        if self.append_only:
            raise RuntimeError(f"{self.collection_name} is append-only")

        async with self._lock:
            current = self._records.get(document_id)
            if current is None:
                return None
            if any(getattr(current, key, None) != value for key, value in conditions.items()):
                return None

            fields = {k: v for k, v in fields.items() if k not in ("id", "_id", "created_at")}
            fields.setdefault("updated_at", dt.datetime.now(dt.UTC))

            merged = current.model_dump(exclude=set(type(current).model_computed_fields))
            merged.update(fields)
            updated = self.model_class.model_validate(merged)
            self._records[document_id] = updated

        logger.debug(
            f"Updated document in {self.collection_name}",
            extra={"document_id": document_id, "fields": sorted(fields)}
        )
        return updated.model_copy(deep=True)

    @staticmethod
    def _sorted(records: List[T], sort: Optional[SortSpec]) -> List[T]:
        # Apply keys last-to-first; each pass is stable
        for field, direction in reversed(sort or []):
            records = sorted(
                records,
                key=lambda record: _sort_value(getattr(record, field, None)),
                reverse=direction < 0,
            )
        return records


class InMemoryVoiceInteractionRepository(InMemoryRepository[VoiceInteraction]):
    append_only = True

    def __init__(self):
        super().__init__("voice_logs", VoiceInteraction)


class InMemoryEnrichmentRepository(InMemoryRepository[ContactEnrichment]):
    """In-memory counterpart of EnrichmentRepository."""

    def __init__(self):
        super().__init__("contact_enrichments", ContactEnrichment)

    async def find_by_contact(self, contact_id: str) -> Optional[ContactEnrichment]:
        return await self.find_one({"contact_id": contact_id})

    async def find_by_status(
        self,
        status: EnrichmentStatus,
        limit: int = 100
    ) -> List[ContactEnrichment]:
        return await self.find_many(
            {"enrichment_status": status},
            limit=limit,
            sort=[("updated_at", 1)]
        )

    async def find_stale(
        self,
        before: dt.datetime,
        limit: int = 100
    ) -> List[ContactEnrichment]:
        stale = [
            record for record in await self.find_many(
                {"enrichment_status": EnrichmentStatus.COMPLETE},
                limit=0,
                sort=[("last_enriched_at", 1)]
            )
            if record.last_enriched_at is not None and record.last_enriched_at < before
        ]
        return stale[:limit] if limit else stale

    async def find_stuck(
        self,
        before: dt.datetime,
        limit: int = 100
    ) -> List[ContactEnrichment]:
        stuck = [
            record for record in await self.find_many(
                {"enrichment_status": EnrichmentStatus.PROCESSING},
                limit=0,
                sort=[("updated_at", 1)]
            )
            if record.updated_at < before
        ]
        return stuck[:limit] if limit else stuck

    async def compare_and_set(
        self,
        enrichment_id: str,
        expected_status: EnrichmentStatus,
        expected_cycle: int,
        fields: Dict[str, Any]
    ) -> Optional[ContactEnrichment]:
        return await self._conditional_set(
            {"enrichment_status": expected_status, "cycle": expected_cycle},
            enrichment_id,
            fields,
        )

    async def delete_by_contact(self, contact_id: str) -> int:
        async with self._lock:
            doomed = [
                record_id for record_id, record in self._records.items()
                if record.contact_id == contact_id
            ]
            for record_id in doomed:
                del self._records[record_id]
        return len(doomed)
