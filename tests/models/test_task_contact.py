"""
Tests for Task, Contact and the input validation helpers.
"""
import pytest
import datetime as dt

from src.errors import ValidationError
from src.models.base import changed_fields, merged_input, validate_input
from src.models.contact import Contact
from src.models.task import Task, TaskPriority, completion_fields


NOW = dt.datetime(2024, 1, 12, 9, 0, tzinfo=dt.UTC)


class TestTask:

    def test_defaults(self):
        task = Task(title="Send proposal")

        assert task.priority == TaskPriority.MEDIUM
        assert task.category == "reminder"
        assert task.is_completed is False
        assert task.completed_at is None

    def test_completed_requires_timestamp(self):
        with pytest.raises(ValueError):
            Task(title="x", is_completed=True)

    def test_timestamp_requires_completed(self):
        with pytest.raises(ValueError):
            Task(title="x", completed_at=NOW)

    def test_blank_title_rejected(self):
        with pytest.raises(ValueError):
            Task(title="   ")

    def test_unknown_category_accepted(self):
        assert Task(title="x", category="birthday").category == "birthday"

    def test_completion_fields_written_together(self):
        assert completion_fields(True, NOW) == {"is_completed": True, "completed_at": NOW}
        assert completion_fields(False, NOW) == {"is_completed": False, "completed_at": None}


class TestContact:

    def test_full_name(self):
        assert Contact(first_name="Ada", last_name="Lovelace").full_name == "Ada Lovelace"

    def test_names_required(self):
        with pytest.raises(ValueError):
            Contact(first_name="Ada", last_name="")

    def test_tags_deduplicated_in_order(self):
        contact = Contact(first_name="A", last_name="B", tags=["vip", " investor ", "vip", ""])

        assert contact.tags == ["vip", "investor"]


class TestValidationHelpers:

    def test_validate_input_raises_domain_error_with_field(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_input(Contact, {"first_name": "Ada"})

        assert exc_info.value.field == "last_name"

    def test_changed_fields_only_reports_differences(self):
        current = Contact(first_name="Ada", last_name="Lovelace", company="Engines")
        data = {"company": "Engines", "role": "CTO"}

        validated = validate_input(Contact, merged_input(current, data))

        assert changed_fields(current, validated, data) == {"role": "CTO"}

    def test_merged_input_excludes_computed_fields(self):
        current = Contact(first_name="Ada", last_name="Lovelace")

        assert "full_name" not in merged_input(current, {})
