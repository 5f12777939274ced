import pytest
import datetime as dt
from typing import List, Optional

from src.errors import ProviderError
from src.models.contact import Contact
from src.models.enrichment import EnrichmentFacts, NewsItem, ProfessionalProfile, EmployerProfile
from src.repositories import memory_repositories
from src.services.container import build_services
from src.services.enrichment_manager import EnrichmentLifecycleManager

# Reference "now" used across the suite: a Friday morning in UTC
NOW = dt.datetime(2024, 1, 12, 9, 0, tzinfo=dt.UTC)


class FakeClock:
    """Settable clock so tests control what the services consider now."""

    def __init__(self, now: dt.datetime = NOW):
        self.now = now

    def __call__(self) -> dt.datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + dt.timedelta(**kwargs)


class StubProvider:
    """Provider double that records calls and answers from a script."""

    def __init__(self, facts: Optional[EnrichmentFacts] = None, error: Optional[Exception] = None):
        self.facts = facts or EnrichmentFacts()
        self.error = error
        self.calls: List[str] = []

    async def request_enrichment(self, contact: Contact) -> EnrichmentFacts:
        self.calls.append(contact.id)
        if self.error:
            raise self.error
        return self.facts


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sample_facts() -> EnrichmentFacts:
    return EnrichmentFacts(
        profile=ProfessionalProfile(
            linkedin_url="https://linkedin.com/in/ada",
            headline="VP Engineering at Analytical Engines",
        ),
        employer=EmployerProfile(industry="Computing", size="51-200"),
        recent_news=[
            NewsItem(title=f"Headline {i}", url=f"https://news.example/{i}", date="2024-01-0{i}")
            for i in range(1, 6)
        ],
    )


@pytest.fixture
def provider(sample_facts) -> StubProvider:
    return StubProvider(facts=sample_facts)


@pytest.fixture
def failing_provider() -> StubProvider:
    return StubProvider(error=ProviderError("Provider timed out after 30.0s"))


@pytest.fixture
def repos():
    """Fresh in-memory repository set per test."""
    return memory_repositories()


@pytest.fixture
def manager(repos, provider, clock) -> EnrichmentLifecycleManager:
    return EnrichmentLifecycleManager(repos.enrichments, repos.contacts, provider, clock=clock)


@pytest.fixture
def services(repos, provider, clock):
    return build_services(repos, provider=provider, clock=clock)


@pytest.fixture
def contact_data() -> dict:
    return {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "company": "Analytical Engines",
        "email": "ada@engines.example",
        "tags": ["investor", "vip"],
    }


@pytest.fixture
def now(clock) -> dt.datetime:
    return clock.now


@pytest.fixture
def make_provider():
    """Build a StubProvider with custom facts or error."""
    return StubProvider
