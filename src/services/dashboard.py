"""
Dashboard Service

Home screen aggregates, recomputed from the collections on every call.
"""

import datetime as dt
from typing import Callable, List, Optional
from pydantic import BaseModel, Field

from src.config import get_settings
from src.core.statistics import DashboardStats, compute_dashboard_stats
from src.core.views import TaskFilter, TaskView, build_task_list
from src.models.base import utc_now
from src.models.contact import Contact


class DashboardOverview(BaseModel):
    stats: DashboardStats
    upcoming_tasks: List[TaskView] = Field(default_factory=list)
    recent_contacts: List[Contact] = Field(default_factory=list)


class DashboardService:

    def __init__(self, repositories, clock: Optional[Callable[[], dt.datetime]] = None):
        self._repos = repositories
        self._clock = clock or utc_now

    async def stats(self, now: Optional[dt.datetime] = None) -> DashboardStats:
        tasks = await self._repos.tasks.list_all()
        contacts = await self._repos.contacts.list_all()
        interactions = await self._repos.voice_logs.list_all()
        return compute_dashboard_stats(
            tasks,
            contacts,
            interactions,
            now or self._clock(),
            get_settings().display_timezone,
        )

    async def overview(self, now: Optional[dt.datetime] = None) -> DashboardOverview:
        """Stats plus the first few pending tasks and the newest contacts."""
        settings = get_settings()
        now = now or self._clock()
        limit = settings.dashboard_recent_limit

        tasks = await self._repos.tasks.list_all(sort=[("created_at", 1)])
        pending = build_task_list(tasks, TaskFilter.PENDING, now, settings.display_timezone)
        contacts = await self._repos.contacts.find_many({}, limit=limit, sort=[("created_at", -1)])

        return DashboardOverview(
            stats=await self.stats(now),
            upcoming_tasks=pending[:limit],
            recent_contacts=contacts,
        )
