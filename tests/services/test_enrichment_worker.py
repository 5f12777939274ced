"""
Tests for EnrichmentWorker.
"""

import pytest
import asyncio

from src.models.contact import Contact
from src.models.enrichment import EnrichmentStatus
from src.services.enrichment_worker import EnrichmentWorker


class TestEnrichmentWorker:
    """Test suite for EnrichmentWorker."""

    @pytest.fixture
    async def contacts(self, repos, manager):
        created = []
        for first in ("Ada", "Grace", "Alan"):
            contact = await repos.contacts.create(Contact(first_name=first, last_name="Test"))
            await manager.open_job(contact.id)
            created.append(contact)
        return created

    @pytest.mark.asyncio
    async def test_poll_once_runs_pending_jobs(self, manager, provider, contacts):
        """Test that one poll schedules every pending job and they complete."""
        worker = EnrichmentWorker(manager, max_concurrent=2, refresh_stale=False)

        scheduled = await worker.poll_once()
        await worker.drain()

        assert scheduled == 3
        assert sorted(provider.calls) == sorted(c.id for c in contacts)
        for contact in contacts:
            record = await manager.get(contact.id)
            assert record.enrichment_status == EnrichmentStatus.COMPLETE

    @pytest.mark.asyncio
    async def test_poll_with_nothing_pending(self, manager):
        worker = EnrichmentWorker(manager, refresh_stale=False)

        assert await worker.poll_once() == 0

    @pytest.mark.asyncio
    async def test_in_flight_contact_not_scheduled_twice(self, repos, manager, make_provider, clock):
        """Test that a contact whose job is still running is skipped on the next poll."""
        release = asyncio.Event()

        class SlowProvider:
            calls = 0

            async def request_enrichment(self, contact):
                SlowProvider.calls += 1
                await release.wait()
                return make_provider().facts

        from src.services.enrichment_manager import EnrichmentLifecycleManager
        slow_manager = EnrichmentLifecycleManager(repos.enrichments, repos.contacts, SlowProvider(), clock=clock)
        contact = await repos.contacts.create(Contact(first_name="Ada", last_name="Slow"))
        await slow_manager.open_job(contact.id)

        worker = EnrichmentWorker(slow_manager, refresh_stale=False)
        assert await worker.poll_once() == 1
        await asyncio.sleep(0.01)

        # Refresh while in flight puts the record back to pending
        await slow_manager.request_refresh(contact.id)
        assert await worker.poll_once() == 0

        release.set()
        await worker.drain()

        assert SlowProvider.calls == 1
        record = await slow_manager.get(contact.id)
        assert record.enrichment_status == EnrichmentStatus.PENDING
        assert record.cycle == 2

    @pytest.mark.asyncio
    async def test_failures_do_not_stop_the_worker(self, repos, failing_provider, clock):
        from src.services.enrichment_manager import EnrichmentLifecycleManager
        manager = EnrichmentLifecycleManager(repos.enrichments, repos.contacts, failing_provider, clock=clock)
        contact = await repos.contacts.create(Contact(first_name="Ada", last_name="Fail"))
        await manager.open_job(contact.id)

        worker = EnrichmentWorker(manager, refresh_stale=False)
        await worker.poll_once()
        await worker.drain()

        record = await manager.get(contact.id)
        assert record.enrichment_status == EnrichmentStatus.FAILED

    @pytest.mark.asyncio
    async def test_start_and_stop(self, manager, contacts):
        """Test that the background loop processes jobs and stops cleanly."""
        worker = EnrichmentWorker(manager, poll_interval=0.01)
        worker_task = asyncio.create_task(worker.start())

        try:
            for _ in range(100):
                records = [await manager.get(c.id) for c in contacts]
                if all(r.enrichment_status == EnrichmentStatus.COMPLETE for r in records):
                    break
                await asyncio.sleep(0.01)

            assert worker.is_running
            assert all(r.enrichment_status == EnrichmentStatus.COMPLETE for r in records)

        finally:
            await worker.stop()
            worker_task.cancel()
            try:
                await worker_task
            except asyncio.CancelledError:
                pass

        assert not worker.is_running
