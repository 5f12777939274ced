"""
Task Service Tests
"""
import pytest
import datetime as dt

from src.core.views import TaskFilter
from src.errors import NotFoundError, ValidationError


pytestmark = pytest.mark.asyncio


class TestTaskCreate:

    async def test_create_defaults(self, services):
        task = await services.tasks.create({"title": "Send proposal"})

        assert task.id is not None
        assert task.priority == "medium"
        assert task.is_completed is False
        assert task.completed_at is None

    async def test_create_completed_stamps_time(self, services, clock):
        task = await services.tasks.create({"title": "Done already", "is_completed": True})

        assert task.completed_at == clock.now

    async def test_create_ignores_supplied_completed_at(self, services, now):
        task = await services.tasks.create({"title": "x", "completed_at": now})

        assert task.completed_at is None

    async def test_missing_title(self, services, repos):
        with pytest.raises(ValidationError):
            await services.tasks.create({"description": "no title"})

        assert await repos.tasks.count() == 0

    async def test_contact_name_snapshot(self, services, contact_data):
        contact = await services.contacts.create(contact_data)

        task = await services.tasks.create({"title": "Call", "related_contact_id": contact.id})

        assert task.related_contact_name == "Ada Lovelace"

    async def test_unknown_contact(self, services):
        with pytest.raises(NotFoundError):
            await services.tasks.create({"title": "Call", "related_contact_id": "ghost"})


class TestTaskCompletion:

    async def test_toggle_round_trip(self, services, clock):
        """Should stamp on complete and clear on reopen, both fields together."""
        task = await services.tasks.create({"title": "Call"})

        done = await services.tasks.toggle_completion(task.id)
        assert done.is_completed is True
        assert done.completed_at == clock.now

        reopened = await services.tasks.toggle_completion(task.id)
        assert reopened.is_completed is False
        assert reopened.completed_at is None

    async def test_set_completion(self, services, clock):
        task = await services.tasks.create({"title": "Call"})

        done = await services.tasks.set_completion(task.id, True)

        assert done.completed_at == clock.now

    async def test_update_routes_completion(self, services, clock):
        task = await services.tasks.create({"title": "Call"})

        done = await services.tasks.update(task.id, {"is_completed": True})

        assert done.is_completed is True
        assert done.completed_at == clock.now

    async def test_update_same_completion_keeps_stamp(self, services, clock):
        task = await services.tasks.create({"title": "Call", "is_completed": True})
        clock.advance(hours=2)

        same = await services.tasks.update(task.id, {"is_completed": True, "priority": "high"})

        assert same.completed_at == task.completed_at
        assert same.priority == "high"

    async def test_update_null_completion_keeps_task_completed(self, services):
        """Should treat is_completed=None as not sent."""
        task = await services.tasks.create({"title": "Call", "is_completed": True})

        updated = await services.tasks.update(task.id, {"title": "Call back", "is_completed": None})

        assert updated.title == "Call back"
        assert updated.is_completed is True
        assert updated.completed_at == task.completed_at

    async def test_toggle_unknown(self, services):
        with pytest.raises(NotFoundError):
            await services.tasks.toggle_completion("missing")


class TestTaskUpdate:

    async def test_relink_resnapshots_name(self, services, contact_data):
        ada = await services.contacts.create(contact_data)
        grace = await services.contacts.create({"first_name": "Grace", "last_name": "Hopper"})
        task = await services.tasks.create({"title": "Call", "related_contact_id": ada.id})

        moved = await services.tasks.update(task.id, {"related_contact_id": grace.id})

        assert moved.related_contact_name == "Grace Hopper"

    async def test_unlink_clears_snapshot(self, services, contact_data):
        ada = await services.contacts.create(contact_data)
        task = await services.tasks.create({"title": "Call", "related_contact_id": ada.id})

        unlinked = await services.tasks.update(task.id, {"related_contact_id": None})

        assert unlinked.related_contact_id is None
        assert unlinked.related_contact_name is None

    async def test_snapshot_not_directly_writable(self, services, contact_data):
        ada = await services.contacts.create(contact_data)
        task = await services.tasks.create({"title": "Call", "related_contact_id": ada.id})

        same = await services.tasks.update(task.id, {"related_contact_name": "Someone Else"})

        assert same.related_contact_name == "Ada Lovelace"

    async def test_delete(self, services):
        task = await services.tasks.create({"title": "Call"})

        await services.tasks.delete(task.id)

        with pytest.raises(NotFoundError):
            await services.tasks.get(task.id)


class TestTaskViews:

    async def test_list_view_and_stats(self, services, now):
        await services.tasks.create({"title": "late", "due_date": now - dt.timedelta(days=2)})
        await services.tasks.create({"title": "undated"})
        await services.tasks.create({"title": "soon", "due_date": now + dt.timedelta(days=1)})
        await services.tasks.create({"title": "done", "is_completed": True})

        pending = await services.tasks.list_view(TaskFilter.PENDING)
        overdue = await services.tasks.list_view(TaskFilter.OVERDUE)
        stats = await services.tasks.stats()

        assert [v.task.title for v in pending] == ["late", "soon", "undated"]
        assert [v.task.title for v in overdue] == ["late"]
        assert stats.total == 4
        assert stats.completed == 1
        assert stats.overdue == 1
