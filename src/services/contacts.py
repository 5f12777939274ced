"""
Contact Service

Create/update/delete entry points for contacts. Creating a contact opens its
enrichment job; deleting one removes the enrichment in the same operation.
"""

import datetime as dt
from typing import Any, Callable, Dict, List, Optional
from pydantic import BaseModel, Field

from src.config import get_settings
from src.core.views import EnrichmentView, TaskFilter, TaskView, build_enrichment_view, build_task_list, filter_contacts
from src.errors import NotFoundError
from src.models.base import changed_fields, merged_input, utc_now, validate_input
from src.models.contact import Contact
from src.services.enrichment_manager import EnrichmentLifecycleManager
from src.utils.observability import logger, log_business_event


class ContactDetail(BaseModel):
    """Contact page: the record, its enrichment panel and linked tasks."""
    contact: Contact
    enrichment: Optional[EnrichmentView] = None
    tasks: List[TaskView] = Field(default_factory=list)


class ContactService:

    def __init__(
        self,
        contacts,
        tasks,
        enrichment: EnrichmentLifecycleManager,
        clock: Optional[Callable[[], dt.datetime]] = None,
    ):
        self._contacts = contacts
        self._tasks = tasks
        self._enrichment = enrichment
        self._clock = clock or utc_now

    async def create(self, data: Dict[str, Any]) -> Contact:
        """
        Validate and store a contact, then open its pending enrichment.

        Raises:
            ValidationError: If first or last name is missing
        """
        contact = validate_input(Contact, data)
        created = await self._contacts.create(contact)
        await self._enrichment.open_job(created.id)

        log_business_event("contact_created", created.id, name=created.full_name)
        return created

    async def get(self, contact_id: str) -> Contact:
        contact = await self._contacts.find_by_id(contact_id)
        if contact is None:
            raise NotFoundError("Contact", contact_id)
        return contact

    async def update(self, contact_id: str, data: Dict[str, Any]) -> Contact:
        """
        Apply a partial update.

        Tasks keep the contact name they captured when they were linked.

        Raises:
            NotFoundError: If the contact does not exist
            ValidationError: If the result would be invalid
        """
        current = await self.get(contact_id)
        validated = validate_input(Contact, merged_input(current, data))
        fields = changed_fields(current, validated, data)
        if not fields:
            return current

        updated = await self._contacts.update_fields(contact_id, fields)
        if updated is None:
            raise NotFoundError("Contact", contact_id)
        return updated

    async def delete(self, contact_id: str) -> None:
        """
        Delete a contact and its enrichment.

        The enrichment goes first so a failure part-way never leaves an
        enrichment pointing at a missing contact. A second sweep after the
        contact is gone removes any job opened concurrently in between.

        Raises:
            NotFoundError: If the contact does not exist
        """
        await self.get(contact_id)
        await self._enrichment.delete_for_contact(contact_id)

        if not await self._contacts.delete(contact_id):
            raise NotFoundError("Contact", contact_id)
        await self._enrichment.delete_for_contact(contact_id)

        log_business_event("contact_deleted", contact_id)

    async def search(self, query: str = "") -> List[Contact]:
        """Newest first, filtered by the search box text."""
        contacts = await self._contacts.list_all(sort=[("created_at", -1)])
        return filter_contacts(contacts, query)

    async def touch(self, contact_id: str, when: Optional[dt.datetime] = None) -> Contact:
        """Record an interaction with the contact."""
        await self.get(contact_id)
        updated = await self._contacts.update_fields(
            contact_id, {"last_contact_date": when or self._clock()}
        )
        if updated is None:
            raise NotFoundError("Contact", contact_id)
        return updated

    async def detail(self, contact_id: str, now: Optional[dt.datetime] = None) -> ContactDetail:
        settings = get_settings()
        contact = await self.get(contact_id)
        enrichment = await self._enrichment.get(contact_id)
        tasks = await self._tasks.find_many({"related_contact_id": contact_id}, limit=0)

        logger.debug(f"Loaded contact detail {contact_id}", extra={"task_count": len(tasks)})

        return ContactDetail(
            contact=contact,
            enrichment=(
                build_enrichment_view(enrichment, settings.news_display_limit) if enrichment else None
            ),
            tasks=build_task_list(tasks, TaskFilter.ALL, now or self._clock(), settings.display_timezone),
        )
