"""
Task Service

Mutation entry points and list views for tasks. The two completion fields
are only ever written together, in one repository call.
"""

import datetime as dt
from typing import Any, Callable, Dict, List, Optional

from src.config import get_settings
from src.core.statistics import TaskStats, compute_task_stats
from src.core.views import TaskFilter, TaskView, build_task_list
from src.errors import NotFoundError
from src.models.base import changed_fields, merged_input, utc_now, validate_input
from src.models.task import Task, completion_fields
from src.utils.observability import log_business_event


class TaskService:

    def __init__(
        self,
        tasks,
        contacts,
        clock: Optional[Callable[[], dt.datetime]] = None,
    ):
        self._tasks = tasks
        self._contacts = contacts
        self._clock = clock or utc_now

    async def create(self, data: Dict[str, Any]) -> Task:
        """
        Validate and store a task.

        A related contact's current name is copied onto the task. A task
        created as completed is stamped with the current time.

        Raises:
            ValidationError: If the title is missing
            NotFoundError: If related_contact_id names no contact
        """
        data = await self._with_contact_snapshot(dict(data))
        data.pop("completed_at", None)
        data.update(completion_fields(bool(data.get("is_completed")), self._clock()))

        task = validate_input(Task, data)
        created = await self._tasks.create(task)

        log_business_event("task_created", created.id, category=created.category, priority=created.priority.value)
        return created

    async def get(self, task_id: str) -> Task:
        task = await self._tasks.find_by_id(task_id)
        if task is None:
            raise NotFoundError("Task", task_id)
        return task

    async def update(self, task_id: str, data: Dict[str, Any]) -> Task:
        """
        Apply a partial update.

        completed_at cannot be set directly; changing is_completed rewrites
        both completion fields. An is_completed of None leaves them alone.

        Raises:
            NotFoundError: If the task (or a newly linked contact) does not exist
            ValidationError: If the result would be invalid
        """
        current = await self.get(task_id)

        data = dict(data)
        data.pop("completed_at", None)
        data.pop("related_contact_name", None)
        if data.get("is_completed") is None:
            data.pop("is_completed", None)
        if "is_completed" in data:
            if bool(data["is_completed"]) == current.is_completed:
                data.pop("is_completed")
            else:
                data.update(completion_fields(bool(data["is_completed"]), self._clock()))
        if "related_contact_id" in data and data["related_contact_id"] != current.related_contact_id:
            data = await self._with_contact_snapshot(data)

        validated = validate_input(Task, merged_input(current, data))
        fields = changed_fields(current, validated, data)
        if not fields:
            return current

        return await self._write(task_id, fields)

    async def set_completion(self, task_id: str, completed: bool) -> Task:
        """Mark complete (stamping now) or incomplete (clearing the stamp)."""
        await self.get(task_id)
        task = await self._write(task_id, completion_fields(completed, self._clock()))

        log_business_event("task_completed" if completed else "task_reopened", task_id)
        return task

    async def toggle_completion(self, task_id: str) -> Task:
        current = await self.get(task_id)
        return await self.set_completion(task_id, not current.is_completed)

    async def delete(self, task_id: str) -> None:
        if not await self._tasks.delete(task_id):
            raise NotFoundError("Task", task_id)

        log_business_event("task_deleted", task_id)

    async def list_view(
        self,
        task_filter: TaskFilter = TaskFilter.ALL,
        now: Optional[dt.datetime] = None,
    ) -> List[TaskView]:
        tasks = await self._tasks.list_all(sort=[("created_at", 1)])
        return build_task_list(tasks, task_filter, now or self._clock(), get_settings().display_timezone)

    async def stats(self, now: Optional[dt.datetime] = None) -> TaskStats:
        tasks = await self._tasks.list_all()
        return compute_task_stats(tasks, now or self._clock(), get_settings().display_timezone)

    async def _write(self, task_id: str, fields: Dict[str, Any]) -> Task:
        updated = await self._tasks.update_fields(task_id, fields)
        if updated is None:
            raise NotFoundError("Task", task_id)
        return updated

    async def _with_contact_snapshot(self, data: Dict[str, Any]) -> Dict[str, Any]:
        contact_id = data.get("related_contact_id")
        if not contact_id:
            data["related_contact_id"] = None
            data["related_contact_name"] = None
            return data

        contact = await self._contacts.find_by_id(contact_id)
        if contact is None:
            raise NotFoundError("Contact", contact_id)

        data["related_contact_name"] = contact.full_name
        return data
