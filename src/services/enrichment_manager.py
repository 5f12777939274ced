"""
Enrichment Lifecycle Manager

Single writer for every ContactEnrichment record. Moves records through
pending -> processing -> complete | failed, re-opens them on retry/refresh,
and removes them when their contact goes away.

Every write is a compare-and-set on (status, cycle). A provider result that
arrives after its job was superseded, or a duplicate callback for a job that
already finished, matches nothing and is dropped.
"""

import datetime as dt
from dataclasses import dataclass
from typing import Callable, List, Optional
from pymongo.errors import DuplicateKeyError
from src.config import get_settings
from src.errors import ConflictError, NotFoundError, ProviderError
from src.models.base import utc_now
from src.models.enrichment import ContactEnrichment, EnrichmentFacts, EnrichmentStatus
from src.services.enrichment_provider import EnrichmentProvider
from src.utils.observability import logger, log_enrichment_transition


Clock = Callable[[], dt.datetime]


@dataclass(frozen=True)
class EnrichmentTicket:
    """Handle for one in-flight provider call; results must present it."""
    enrichment_id: str
    contact_id: str
    cycle: int


class EnrichmentLifecycleManager:
    """
    Owns the enrichment state machine.

    Usage:
        manager = EnrichmentLifecycleManager(repos.enrichments, repos.contacts, provider)

        await manager.open_job(contact.id)   # on contact creation
        await manager.run(contact.id)        # pending -> processing -> complete/failed
        await manager.request_refresh(contact.id)
    """

    def __init__(
        self,
        enrichments,
        contacts,
        provider: EnrichmentProvider,
        clock: Optional[Clock] = None,
        stale_after_days: Optional[int] = None,
    ):
        settings = get_settings()
        self._enrichments = enrichments
        self._contacts = contacts
        self._provider = provider
        self._clock = clock or utc_now
        self._stale_after = dt.timedelta(
            days=stale_after_days if stale_after_days is not None else settings.enrichment_stale_after_days
        )

    # ============================================
    # QUERIES
    # ============================================

    async def get(self, contact_id: str) -> Optional[ContactEnrichment]:
        return await self._enrichments.find_by_contact(contact_id)

    async def pending_contact_ids(self, limit: int = 100) -> List[str]:
        """Contacts whose jobs are waiting for a provider call."""
        records = await self._enrichments.find_by_status(EnrichmentStatus.PENDING, limit=limit)
        return [record.contact_id for record in records]

    # ============================================
    # LIFECYCLE
    # ============================================

    async def open_job(self, contact_id: str) -> ContactEnrichment:
        """
        Create the pending enrichment for a contact.
        Idempotent: an existing record is returned unchanged.

        Raises:
            NotFoundError: If the contact does not exist, including when it
                is deleted while the record is being created
        """
        if await self._contacts.find_by_id(contact_id) is None:
            raise NotFoundError("Contact", contact_id)

        existing = await self._enrichments.find_by_contact(contact_id)
        if existing:
            return existing

        try:
            created = await self._enrichments.create(ContactEnrichment(contact_id=contact_id))
        except DuplicateKeyError:
            # Lost a race with another opener; theirs is the record
            logger.debug(f"Enrichment for {contact_id} opened concurrently")
            return await self._enrichments.find_by_contact(contact_id)

        # A contact delete that ran during the create has already swept enrichments
        if await self._contacts.find_by_id(contact_id) is None:
            await self._enrichments.delete_by_contact(contact_id)
            raise NotFoundError("Contact", contact_id)

        log_enrichment_transition(
            contact_id=contact_id,
            from_status=None,
            to_status=created.enrichment_status.value,
            cycle=created.cycle,
        )
        return created

    async def begin(self, contact_id: str) -> Optional[EnrichmentTicket]:
        """
        pending -> processing.

        Returns:
            Ticket for the provider call, or None if the job is not pending
        """
        record = await self._enrichments.find_by_contact(contact_id)
        if record is None:
            logger.warning(f"No enrichment to begin for contact {contact_id}")
            return None

        updated = await self._transition(record, EnrichmentStatus.PROCESSING)
        if updated is None:
            return None

        return EnrichmentTicket(
            enrichment_id=updated.id,
            contact_id=updated.contact_id,
            cycle=updated.cycle,
        )

    async def apply_result(
        self,
        ticket: EnrichmentTicket,
        facts: EnrichmentFacts
    ) -> Optional[ContactEnrichment]:
        """
        processing -> complete, if the ticket is still current.

        Returns:
            The completed record, or None for a stale or duplicate result
        """
        record = await self._current_for(ticket)
        if record is None:
            return None

        return await self._transition(record, EnrichmentStatus.COMPLETE, facts=facts)

    async def apply_failure(
        self,
        ticket: EnrichmentTicket,
        error: Exception | str
    ) -> Optional[ContactEnrichment]:
        """
        processing -> failed, if the ticket is still current.
        The error detail is kept on the record for display.
        """
        record = await self._current_for(ticket)
        if record is None:
            return None

        return await self._transition(record, EnrichmentStatus.FAILED, error=str(error))

    async def run(self, contact_id: str) -> Optional[ContactEnrichment]:
        """
        Run one enrichment cycle end to end.

        Provider failures become the failed state and are not raised.

        Returns:
            The record after the cycle, or None if no cycle ran, its
            result was superseded, or the contact is gone (its enrichment
            is deleted)
        """
        ticket = await self.begin(contact_id)
        if ticket is None:
            return None

        contact = await self._contacts.find_by_id(contact_id)
        if contact is None:
            logger.warning(f"Contact {contact_id} vanished before enrichment; removing its record")
            await self.delete_for_contact(contact_id)
            return None

        try:
            facts = await self._provider.request_enrichment(contact)
        except ProviderError as e:
            return await self.apply_failure(ticket, e)
        except Exception as e:
            logger.exception(f"Enrichment provider crashed for contact {contact_id}")
            return await self.apply_failure(ticket, ProviderError(f"Unexpected provider error: {e}"))

        return await self.apply_result(ticket, facts)

    async def request_refresh(self, contact_id: str) -> ContactEnrichment:
        """
        Re-open enrichment for a contact (retry after failure, refresh after
        success, or supersede an in-flight call).

        Stored facts stay in place until the new cycle replaces them.

        Raises:
            NotFoundError: If the contact does not exist
        """
        contact = await self._contacts.find_by_id(contact_id)
        if contact is None:
            raise NotFoundError("Contact", contact_id)

        record = await self._enrichments.find_by_contact(contact_id)
        if record is None:
            return await self.open_job(contact_id)

        if record.enrichment_status == EnrichmentStatus.PENDING:
            return record

        updated = await self._transition(record, EnrichmentStatus.PENDING)
        if updated is None:
            # Someone else moved it first; report what is stored now
            updated = await self._enrichments.find_by_contact(contact_id)
            if updated is None:
                raise NotFoundError("Contact", contact_id)
        return updated

    async def refresh_stale(self, now: Optional[dt.datetime] = None, limit: int = 100) -> int:
        """
        Re-open complete enrichments older than the staleness window, and
        processing ones that have sat untouched for as long (a worker lost
        the write after begin).

        Returns:
            Number of records moved back to pending
        """
        now = now or self._clock()
        cutoff = now - self._stale_after
        stale = await self._enrichments.find_stale(cutoff, limit=limit)
        stale += await self._enrichments.find_stuck(cutoff, limit=limit)

        reopened = 0
        for record in stale:
            if await self._transition(record, EnrichmentStatus.PENDING):
                reopened += 1

        if reopened:
            logger.info(f"Scheduled refresh for {reopened} stale enrichment(s)")
        return reopened

    async def delete_for_contact(self, contact_id: str) -> int:
        """Remove the contact's enrichment; part of the contact delete."""
        removed = await self._enrichments.delete_by_contact(contact_id)
        if removed:
            logger.info(
                f"Deleted enrichment for contact {contact_id}",
                extra={"contact_id": contact_id}
            )
        return removed

    # ============================================
    # INTERNALS
    # ============================================

    async def _current_for(self, ticket: EnrichmentTicket) -> Optional[ContactEnrichment]:
        """The record the ticket refers to, if the ticket is still current."""
        record = await self._enrichments.find_by_id(ticket.enrichment_id)
        if record is None:
            logger.warning(f"Dropping provider result for deleted enrichment {ticket.enrichment_id}")
            return None

        if record.enrichment_status != EnrichmentStatus.PROCESSING or record.cycle != ticket.cycle:
            self._absorb(ConflictError(
                f"Stale provider result for contact {ticket.contact_id} "
                f"(ticket cycle {ticket.cycle}, record {record.enrichment_status} cycle {record.cycle})",
                current=record.enrichment_status.value,
            ))
            return None

        return record

    async def _transition(
        self,
        record: ContactEnrichment,
        target: EnrichmentStatus,
        facts: Optional[EnrichmentFacts] = None,
        error: Optional[str] = None,
    ) -> Optional[ContactEnrichment]:
        try:
            fields = record.transition_fields(target, self._clock(), facts=facts, error=error)
        except ConflictError as e:
            self._absorb(e)
            return None

        updated = await self._enrichments.compare_and_set(
            record.id,
            record.enrichment_status,
            record.cycle,
            fields,
        )
        if updated is None:
            self._absorb(ConflictError(
                f"Enrichment for contact {record.contact_id} changed before "
                f"{record.enrichment_status} -> {target} could be written",
                current=record.enrichment_status.value,
                attempted=target.value,
            ))
            return None

        log_enrichment_transition(
            contact_id=record.contact_id,
            from_status=record.enrichment_status.value,
            to_status=updated.enrichment_status.value,
            cycle=updated.cycle,
            error_detail=updated.error_detail,
            news_items=len(updated.recent_news),
        )
        return updated

    @staticmethod
    def _absorb(error: ConflictError) -> None:
        logger.warning(
            f"Ignored enrichment transition: {error}",
            extra={"current": error.current, "attempted": error.attempted}
        )
