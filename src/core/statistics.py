"""
Aggregate Statistics

Dashboard counters as pure reductions over the current collections.
Always recomputed from the records; there are no stored counters to drift.
"""
import datetime as dt
from typing import Iterable, Optional, Sized
from pydantic import BaseModel, computed_field

from src.core.temporal import is_past_due
from src.models.task import Task


class TaskStats(BaseModel):
    total: int = 0
    pending: int = 0
    completed: int = 0
    overdue: int = 0

    @computed_field
    @property
    def completion_rate(self) -> float:
        if self.total == 0:
            return 0.0
        return self.completed / self.total


class DashboardStats(BaseModel):
    total_contacts: int = 0
    total_tasks: int = 0
    pending_tasks: int = 0
    completed_tasks: int = 0
    overdue_tasks: int = 0
    total_voice_interactions: int = 0
    completion_rate: float = 0.0


def compute_task_stats(
    tasks: Iterable[Task],
    now: Optional[dt.datetime] = None,
    tz: dt.tzinfo | str | None = None,
) -> TaskStats:
    """Overdue counts pending tasks classified past-due; completed ones never count."""
    now = now or dt.datetime.now(dt.UTC)
    stats = TaskStats()
    for task in tasks:
        stats.total += 1
        if task.is_completed:
            stats.completed += 1
            continue
        stats.pending += 1
        if is_past_due(task.due_date, now, tz):
            stats.overdue += 1
    return stats


def compute_dashboard_stats(
    tasks: Iterable[Task],
    contacts: Sized,
    interactions: Sized,
    now: Optional[dt.datetime] = None,
    tz: dt.tzinfo | str | None = None,
) -> DashboardStats:
    task_stats = compute_task_stats(tasks, now, tz)
    return DashboardStats(
        total_contacts=len(contacts),
        total_tasks=task_stats.total,
        pending_tasks=task_stats.pending,
        completed_tasks=task_stats.completed,
        overdue_tasks=task_stats.overdue,
        total_voice_interactions=len(interactions),
        completion_rate=task_stats.completion_rate,
    )
