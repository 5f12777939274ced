"""
Contact Enrichment Model

Third-party facts about a contact plus the state of the job that gathers them.
Transition legality lives here and nowhere else.
"""
import datetime as dt
from enum import StrEnum
from typing import Any, Dict, FrozenSet, List, Optional
from pydantic import BaseModel, Field, computed_field, model_validator
from src.errors import ConflictError
from src.models.base import MongoBaseModel


class EnrichmentStatus(StrEnum):
    PENDING = "pending"         # Job requested, no provider call yet
    PROCESSING = "processing"   # Provider call in flight
    COMPLETE = "complete"       # Terminal success
    FAILED = "failed"           # Terminal failure


ALLOWED_TRANSITIONS: Dict[EnrichmentStatus, FrozenSet[EnrichmentStatus]] = {
    EnrichmentStatus.PENDING: frozenset({EnrichmentStatus.PROCESSING}),
    # PENDING here is a superseding refresh; the cycle bump discards the in-flight result
    EnrichmentStatus.PROCESSING: frozenset({
        EnrichmentStatus.COMPLETE,
        EnrichmentStatus.FAILED,
        EnrichmentStatus.PENDING,
    }),
    EnrichmentStatus.COMPLETE: frozenset({EnrichmentStatus.PENDING}),
    EnrichmentStatus.FAILED: frozenset({EnrichmentStatus.PENDING}),
}


def can_transition(current: EnrichmentStatus, target: EnrichmentStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


class ProfessionalProfile(BaseModel):
    linkedin_url: Optional[str] = None
    headline: Optional[str] = None
    summary: Optional[str] = None


class EmployerProfile(BaseModel):
    description: Optional[str] = None
    industry: Optional[str] = None
    size: Optional[str] = None
    website: Optional[str] = None
    funding_stage: Optional[str] = None


class SocialLinks(BaseModel):
    twitter_url: Optional[str] = None
    github_url: Optional[str] = None


class NewsItem(BaseModel):
    title: str
    url: Optional[str] = None
    date: Optional[str] = None


def _is_empty(group: BaseModel) -> bool:
    return all(value is None for value in group.model_dump().values())


class EnrichmentFacts(BaseModel):
    """What a provider returns for one contact, grouped by provenance."""
    profile: ProfessionalProfile = Field(default_factory=ProfessionalProfile)
    employer: EmployerProfile = Field(default_factory=EmployerProfile)
    social: SocialLinks = Field(default_factory=SocialLinks)
    recent_news: List[NewsItem] = Field(default_factory=list)


class ContactEnrichment(MongoBaseModel):
    """
    One per contact. Status is a closed enum; fields move only through
    transition_fields() so a record can never be failed with a success
    timestamp or complete without one.
    """
    contact_id: str
    enrichment_status: EnrichmentStatus = EnrichmentStatus.PENDING

    profile: ProfessionalProfile = Field(default_factory=ProfessionalProfile)
    employer: EmployerProfile = Field(default_factory=EmployerProfile)
    social: SocialLinks = Field(default_factory=SocialLinks)
    # Full list kept; views show a prefix
    recent_news: List[NewsItem] = Field(default_factory=list)

    last_enriched_at: Optional[dt.datetime] = None
    error_detail: Optional[str] = None
    # Bumped every time the job re-enters PENDING; provider results carry it
    cycle: int = 1

    @model_validator(mode="after")
    def status_consistent(self) -> "ContactEnrichment":
        if self.enrichment_status == EnrichmentStatus.COMPLETE and self.last_enriched_at is None:
            raise ValueError("complete enrichment requires last_enriched_at")
        if self.enrichment_status == EnrichmentStatus.FAILED and self.last_enriched_at is not None:
            raise ValueError("failed enrichment cannot carry last_enriched_at")
        return self

    @computed_field
    @property
    def has_facts(self) -> bool:
        return bool(self.recent_news) or not all(
            _is_empty(group) for group in (self.profile, self.employer, self.social)
        )

    @computed_field
    @property
    def is_refreshing(self) -> bool:
        """Stale facts are on display while a new cycle runs."""
        return self.has_facts and self.enrichment_status in (
            EnrichmentStatus.PENDING,
            EnrichmentStatus.PROCESSING,
        )

    @computed_field
    @property
    def can_retry(self) -> bool:
        return self.enrichment_status == EnrichmentStatus.FAILED

    def transition_fields(
        self,
        target: EnrichmentStatus,
        now: dt.datetime,
        facts: Optional[EnrichmentFacts] = None,
        error: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Compute the field changes for moving to `target`.

        Raises:
            ConflictError: If the transition is not legal from the current status
        """
        current = self.enrichment_status
        if not can_transition(current, target):
            raise ConflictError(
                f"Illegal enrichment transition {current} -> {target}",
                current=current.value,
                attempted=target.value,
            )

        fields: Dict[str, Any] = {"enrichment_status": target, "updated_at": now}

        if target == EnrichmentStatus.PENDING:
            fields["cycle"] = self.cycle + 1
            fields["error_detail"] = None
        elif target == EnrichmentStatus.PROCESSING:
            fields["error_detail"] = None
        elif target == EnrichmentStatus.COMPLETE:
            facts = facts or EnrichmentFacts()
            fields.update(facts.model_dump())
            fields["last_enriched_at"] = now
            fields["error_detail"] = None
        elif target == EnrichmentStatus.FAILED:
            fields["last_enriched_at"] = None
            fields["error_detail"] = error or "Enrichment provider failed"

        return fields
