"""
Contact Enrichment Repository
One enrichment per contact, with guarded state writes.
"""
from typing import Any, Dict, List, Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
import datetime as dt

from .base import BaseRepository
from ..models.enrichment import ContactEnrichment, EnrichmentStatus
from ..utils.observability import logger


class EnrichmentRepository(BaseRepository[ContactEnrichment]):
    """
    Repository for ContactEnrichment persistence.

    compare_and_set() is the only way the lifecycle manager writes status:
    the expected status and cycle are part of the match filter, so a stale
    writer matches nothing and changes nothing.
    """

    def __init__(self, database: AsyncIOMotorDatabase):
        """Initialize enrichment repository with database connection."""
        super().__init__(database, "contact_enrichments", ContactEnrichment)

    async def find_by_contact(self, contact_id: str) -> Optional[ContactEnrichment]:
        """
        Retrieve the enrichment owned by a contact.

        Args:
            contact_id: Owning contact id

        Returns:
            ContactEnrichment or None if the contact has none
        """
        return await self.find_one({"contact_id": contact_id})

    async def find_by_status(
        self,
        status: EnrichmentStatus,
        limit: int = 100
    ) -> List[ContactEnrichment]:
        """Oldest-updated first, so long-waiting jobs run first."""
        return await self.find_many(
            {"enrichment_status": status.value},
            limit=limit,
            sort=[("updated_at", 1)]
        )

    async def find_stale(
        self,
        before: dt.datetime,
        limit: int = 100
    ) -> List[ContactEnrichment]:
        """
        Complete enrichments last refreshed before `before`.

        Args:
            before: Refresh cutoff
            limit: Maximum number of records

        Returns:
            Records sorted by last refresh, oldest first
        """
        return await self.find_many(
            {
                "enrichment_status": EnrichmentStatus.COMPLETE.value,
                "last_enriched_at": {"$lt": before},
            },
            limit=limit,
            sort=[("last_enriched_at", 1)]
        )

    async def find_stuck(
        self,
        before: dt.datetime,
        limit: int = 100
    ) -> List[ContactEnrichment]:
        """Processing records untouched since `before` (their result write was lost)."""
        return await self.find_many(
            {
                "enrichment_status": EnrichmentStatus.PROCESSING.value,
                "updated_at": {"$lt": before},
            },
            limit=limit,
            sort=[("updated_at", 1)]
        )

    async def compare_and_set(
        self,
        enrichment_id: str,
        expected_status: EnrichmentStatus,
        expected_cycle: int,
        fields: Dict[str, Any]
    ) -> Optional[ContactEnrichment]:
        """
        Write `fields` only if the record is still in the expected state.

        Returns:
            The updated record, or None if the guard did not match
        """
        return await self._conditional_set(
            {"enrichment_status": expected_status.value, "cycle": expected_cycle},
            enrichment_id,
            fields,
        )

    async def delete_by_contact(self, contact_id: str) -> int:
        """
        Delete every enrichment owned by a contact.

        Returns:
            Number of records removed
        """
        result = await self.collection.delete_many({"contact_id": contact_id})

        if result.deleted_count:
            logger.debug(
                f"Deleted enrichment for contact {contact_id}",
                extra={"contact_id": contact_id, "count": result.deleted_count}
            )

        return result.deleted_count
