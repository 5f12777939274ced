"""
Contact Endpoints

Contact CRUD plus the enrichment panel and its refresh/retry action.
"""
from fastapi import APIRouter, Depends, Response, status

from src.api.dependencies import get_contact_service, get_enrichment_manager
from src.api.models.requests import ContactCreate, ContactTouch, ContactUpdate
from src.config import settings
from src.core.views import build_enrichment_view
from src.errors import NotFoundError
from src.services.contacts import ContactService
from src.services.enrichment_manager import EnrichmentLifecycleManager

router = APIRouter(prefix="/contacts", tags=["Contacts"])


@router.get("")
async def list_contacts(q: str = "", service: ContactService = Depends(get_contact_service)):
    """Newest first; q matches name, company, email or any tag."""
    contacts = await service.search(q)
    return [contact.model_dump(mode="json") for contact in contacts]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_contact(body: ContactCreate, service: ContactService = Depends(get_contact_service)):
    """Create a contact; its enrichment starts out pending."""
    contact = await service.create(body.sent_fields())
    return contact.model_dump(mode="json")


@router.get("/{contact_id}")
async def get_contact(contact_id: str, service: ContactService = Depends(get_contact_service)):
    """Contact page: record, enrichment panel and linked tasks."""
    detail = await service.detail(contact_id)
    return detail.model_dump(mode="json")


@router.patch("/{contact_id}")
async def update_contact(
    contact_id: str,
    body: ContactUpdate,
    service: ContactService = Depends(get_contact_service)
):
    contact = await service.update(contact_id, body.sent_fields())
    return contact.model_dump(mode="json")


@router.delete("/{contact_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_contact(contact_id: str, service: ContactService = Depends(get_contact_service)):
    """Delete the contact together with its enrichment."""
    await service.delete(contact_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{contact_id}/touch")
async def touch_contact(
    contact_id: str,
    body: ContactTouch,
    service: ContactService = Depends(get_contact_service)
):
    """Record an interaction (updates last_contact_date)."""
    contact = await service.touch(contact_id, body.when)
    return contact.model_dump(mode="json")


@router.get("/{contact_id}/enrichment")
async def get_enrichment(
    contact_id: str,
    manager: EnrichmentLifecycleManager = Depends(get_enrichment_manager)
):
    enrichment = await manager.get(contact_id)
    if enrichment is None:
        raise NotFoundError("Enrichment for contact", contact_id)
    return build_enrichment_view(enrichment, settings.news_display_limit).model_dump(mode="json")


@router.post("/{contact_id}/enrichment/refresh", status_code=status.HTTP_202_ACCEPTED)
async def refresh_enrichment(
    contact_id: str,
    manager: EnrichmentLifecycleManager = Depends(get_enrichment_manager)
):
    """
    Retry a failed enrichment or refresh a completed one.

    The stored facts stay visible while the new cycle runs.
    """
    enrichment = await manager.request_refresh(contact_id)
    return build_enrichment_view(enrichment, settings.news_display_limit).model_dump(mode="json")
