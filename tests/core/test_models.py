"""
Tests for tasktable data models.
"""

import pytest
from datetime import datetime, timezone
from decimal import Decimal


class TestTaskModel:
    """Tests for Task model."""

    def test_task_creation(self):
        """Test creating a task with defaults."""
        from tasktable.models.task import Task

        task = Task(title="Test task")

        assert task.title == "Test task"
        assert task.priority == 3
        assert task.completed is False
        assert task.tags == []
        assert task.metadata == {}
        assert task.id
        assert task.created_at is not None
        assert task.updated_at is None

    def test_ids_are_unique(self):
        from tasktable.models.task import Task

        ids = {Task(title="t").id for _ in range(100)}

        assert len(ids) == 100

    def test_metadata_accessors(self):
        from tasktable.models.task import Task

        task = Task(title="Test", metadata={"assignee": "Alice", "category": "ops"})

        assert task.assignee == "Alice"
        assert task.category == "ops"
        assert task.due_date is None

    def test_task_to_dict(self):
        """Test serialization to the wire layout."""
        from tasktable.models.task import Task

        task = Task(
            title="Test",
            tags=["bug", "urgent"],
            metadata={"assignee": "Alice"},
            created_at=datetime(2026, 1, 2, 3, 4, 5, 6000, tzinfo=timezone.utc),
        )

        result = task.to_dict()

        assert result["title"] == "Test"
        assert result["tags"] == ["bug", "urgent"]
        assert result["metadata"] == {"assignee": "Alice"}
        assert result["completed"] is False
        assert result["createdAt"] == "2026-01-02T03:04:05.006000Z"
        assert "updatedAt" not in result

    def test_task_from_dict(self):
        """Test deserialization from a table item."""
        from tasktable.models.task import Task

        data = {
            "id": "test-id",
            "title": "Test",
            "priority": Decimal("5"),
            "completed": True,
            "tags": '["tag1", "tag2"]',  # JSON text
            "metadata": {"dueDate": "2026-02-01"},
            "createdAt": "2026-01-01T00:00:00.000000Z",
            "updatedAt": "2026-01-02T00:00:00.000000Z",
        }

        task = Task.from_dict(data)

        assert task.id == "test-id"
        assert task.priority == 5
        assert isinstance(task.priority, int)
        assert task.completed is True
        assert task.tags == ["tag1", "tag2"]
        assert task.due_date == "2026-02-01"
        assert task.created_at == datetime(2026, 1, 1, tzinfo=timezone.utc)
        assert task.updated_at > task.created_at

    def test_round_trip_through_dict(self):
        from tasktable.models.task import Task

        task = Task(title="Round", priority=1, tags=["a", "a"], metadata={"x": "y"})

        assert Task.from_dict(task.to_dict()).to_dict() == task.to_dict()


class TestTimestamps:
    """Tests for timestamp helpers."""

    def test_format_is_fixed_width_utc(self):
        from tasktable.models.task import format_timestamp

        value = datetime(2026, 10, 17, 9, 30, tzinfo=timezone.utc)

        assert format_timestamp(value) == "2026-10-17T09:30:00.000000Z"

    @pytest.mark.parametrize("text", [
        "2026-10-17T09:30:00Z",
        "2026-10-17T09:30:00.000Z",
        "2026-10-17T09:30:00+00:00",
        "2026-10-17T09:30:00",
    ])
    def test_parse_accepts_iso_variants(self, text):
        from tasktable.models.task import parse_timestamp

        assert parse_timestamp(text) == datetime(2026, 10, 17, 9, 30, tzinfo=timezone.utc)

    def test_parse_empty(self):
        from tasktable.models.task import parse_timestamp

        assert parse_timestamp(None) is None
        assert parse_timestamp("") is None
