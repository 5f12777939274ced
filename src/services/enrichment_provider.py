"""
Enrichment Provider

Pluggable source of third-party facts about a contact. The lifecycle manager
calls request_enrichment() when a job enters processing; whatever happens
inside, the result is either EnrichmentFacts or a ProviderError.
"""

import json
import httpx
from typing import Any, Dict, Optional, Protocol
from pydantic import ValidationError as PydanticValidationError
from src.config import get_settings
from src.errors import ProviderError
from src.models.contact import Contact
from src.models.enrichment import EnrichmentFacts
from src.utils.observability import logger


# Column names used by flat provider payloads, mapped to provenance groups
_FLAT_FIELDS = {
    "linkedin_url": ("profile", "linkedin_url"),
    "linkedin_headline": ("profile", "headline"),
    "linkedin_summary": ("profile", "summary"),
    "company_description": ("employer", "description"),
    "company_industry": ("employer", "industry"),
    "company_size": ("employer", "size"),
    "company_website": ("employer", "website"),
    "company_funding_stage": ("employer", "funding_stage"),
    "twitter_url": ("social", "twitter_url"),
    "github_url": ("social", "github_url"),
}


class EnrichmentProvider(Protocol):
    """
    Protocol for enrichment sources.

    Implement this to add new data providers.
    """

    async def request_enrichment(self, contact: Contact) -> EnrichmentFacts:
        """
        Gather facts about a contact.

        Args:
            contact: Contact to enrich

        Returns:
            Facts grouped by provenance

        Raises:
            ProviderError: On failure, timeout or malformed data
        """
        ...


def parse_facts(payload: Dict[str, Any]) -> EnrichmentFacts:
    """
    Validate a provider payload.

    Accepts either the grouped shape (profile/employer/social/recent_news) or
    a flat row with prefixed column names. recent_news may arrive as a JSON
    encoded string.

    Raises:
        ProviderError: If the payload is not a valid facts document
    """
    if not isinstance(payload, dict):
        raise ProviderError(f"Malformed provider payload: expected object, got {type(payload).__name__}")

    grouped: Dict[str, Any] = {
        key: payload[key] for key in ("profile", "employer", "social") if key in payload
    }
    for column, (group, field) in _FLAT_FIELDS.items():
        if payload.get(column) is not None:
            grouped.setdefault(group, {})[field] = payload[column]

    news = payload.get("recent_news") or []
    if isinstance(news, str):
        try:
            news = json.loads(news)
        except json.JSONDecodeError as e:
            raise ProviderError(f"Malformed recent_news: {e}") from e
    grouped["recent_news"] = news

    try:
        return EnrichmentFacts.model_validate(grouped)
    except PydanticValidationError as e:
        raise ProviderError(f"Malformed provider payload: {e.error_count()} invalid field(s)") from e


class HttpEnrichmentProvider:
    """
    HTTP implementation: POSTs the contact's identifying fields and reads
    the facts from the JSON response.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self._url = base_url or settings.enrichment_provider_url
        self._api_key = api_key or settings.enrichment_provider_api_key
        self._timeout = timeout_seconds or settings.enrichment_provider_timeout_seconds
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        """Check if a provider URL is configured."""
        return self._url is not None

    async def request_enrichment(self, contact: Contact) -> EnrichmentFacts:
        if not self._url:
            raise ProviderError("Enrichment provider URL not configured")

        headers = {"Authorization": f"Bearer {self._api_key}"} if self._api_key else {}

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
                response = await client.post(
                    self._url,
                    json=self._build_request(contact),
                    headers=headers,
                )
                response.raise_for_status()
                payload = response.json()

        except httpx.TimeoutException as e:
            raise ProviderError(f"Enrichment provider timed out after {self._timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise ProviderError(f"Enrichment provider returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise ProviderError(f"Enrichment provider request failed: {e}") from e
        except ValueError as e:
            raise ProviderError("Enrichment provider returned invalid JSON") from e

        facts = parse_facts(payload)

        logger.debug(
            f"Enrichment provider answered for contact {contact.id}",
            extra={"contact_id": contact.id, "news_items": len(facts.recent_news)}
        )
        return facts

    def _build_request(self, contact: Contact) -> dict:
        return {
            "contact_id": contact.id,
            "first_name": contact.first_name,
            "last_name": contact.last_name,
            "company": contact.company,
            "role": contact.role,
            "email": contact.email,
            "linkedin": contact.linkedin,
        }


class UnconfiguredEnrichmentProvider:
    """
    Fallback used when no provider is configured.

    Every job fails with a clear reason, which leaves a retry affordance.
    """

    async def request_enrichment(self, contact: Contact) -> EnrichmentFacts:
        logger.warning(
            f"Enrichment requested with no provider configured: {contact.id}",
            extra={"contact_id": contact.id}
        )
        raise ProviderError("No enrichment provider configured")


def get_enrichment_provider() -> EnrichmentProvider:
    """HTTP provider if configured, otherwise the failing fallback."""
    http = HttpEnrichmentProvider()
    return http if http.is_configured else UnconfiguredEnrichmentProvider()
