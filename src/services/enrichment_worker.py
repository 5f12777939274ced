"""
Enrichment Worker

Background worker that picks up pending enrichment jobs and runs them.
"""

import asyncio
from loguru import logger

from src.services.enrichment_manager import EnrichmentLifecycleManager


class EnrichmentWorker:
    """
    Polls for pending enrichments and runs each one through the manager.

    Jobs for different contacts run concurrently up to max_concurrent; a
    contact already in flight is not picked up twice by this worker.

    A job whose storage write fails after begin() leaves its record in
    processing. Only pending records are polled, so it waits for an explicit
    refresh or for refresh_stale to re-open it after the staleness window.

    Attributes:
        manager: Lifecycle manager that owns the state machine
        max_concurrent: Maximum number of provider calls in flight
        poll_interval: Seconds to wait between polls when idle
        batch_size: Pending records fetched per poll
        refresh_stale: Whether each poll also re-opens stale enrichments
    """

    def __init__(
        self,
        manager: EnrichmentLifecycleManager,
        max_concurrent: int = 5,
        poll_interval: float = 5.0,
        batch_size: int = 20,
        refresh_stale: bool = True,
    ):
        self.manager = manager
        self.max_concurrent = max_concurrent
        self.poll_interval = poll_interval
        self.batch_size = batch_size
        self.refresh_stale = refresh_stale
        self._running = False
        self._tasks: set[asyncio.Task] = set()
        self._in_flight: set[str] = set()
        self._semaphore = asyncio.Semaphore(max_concurrent)

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """
        Start the worker.
        Runs until stop() is called.
        """
        if self._running:
            logger.warning("Enrichment worker already running")
            return

        self._running = True
        logger.info(
            f"Enrichment worker started (max_concurrent={self.max_concurrent}, "
            f"poll_interval={self.poll_interval}s)"
        )

        try:
            while self._running:
                scheduled = await self.poll_once()
                if not scheduled:
                    await asyncio.sleep(self.poll_interval)
                else:
                    # Let the scheduled jobs take their semaphore slots
                    await asyncio.sleep(0)

        except Exception as e:
            logger.error(f"Enrichment worker crashed: {e}", exc_info=True)
            raise

        finally:
            logger.info("Enrichment worker stopped")

    async def poll_once(self) -> int:
        """
        Schedule every pending job not already in flight.

        Returns:
            Number of jobs scheduled
        """
        if self.refresh_stale:
            await self.manager.refresh_stale(limit=self.batch_size)

        contact_ids = await self.manager.pending_contact_ids(limit=self.batch_size)

        scheduled = 0
        for contact_id in contact_ids:
            if contact_id in self._in_flight:
                continue
            self._in_flight.add(contact_id)
            task = asyncio.create_task(self._run_job(contact_id))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            scheduled += 1

        return scheduled

    async def drain(self) -> None:
        """Wait for every scheduled job to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def stop(self) -> None:
        """
        Stop the worker.

        Stops polling, waits for in-flight jobs, then cancels stragglers.
        Cancelled jobs stay in processing until their next refresh.
        """
        if not self._running:
            return

        logger.info("Stopping enrichment worker...")
        self._running = False

        if self._tasks:
            logger.info(f"Waiting for {len(self._tasks)} enrichment jobs to complete...")
            try:
                await asyncio.wait_for(self.drain(), timeout=30.0)
            except asyncio.TimeoutError:
                logger.warning("Timeout waiting for enrichment jobs, cancelling remaining")
                for task in self._tasks:
                    task.cancel()

    async def _run_job(self, contact_id: str) -> None:
        async with self._semaphore:
            try:
                result = await self.manager.run(contact_id)
                if result is not None:
                    logger.debug(
                        f"Enrichment job finished for {contact_id}: {result.enrichment_status}",
                        extra={"contact_id": contact_id}
                    )
            except Exception as e:
                # Storage errors; the record keeps whatever state was last written
                logger.error(
                    f"Enrichment job failed for {contact_id}: {e}",
                    extra={"contact_id": contact_id, "error": str(e)},
                    exc_info=True
                )
            finally:
                self._in_flight.discard(contact_id)
