"""
Task model for tasktable.

A task is the single record kind kept in the table. The wire layout produced
by to_dict() is what every backend persists and what callers receive.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union
from uuid import uuid4

from tasktable.codec import DEFAULT_PRIORITY, to_number

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"

# Conventional metadata keys (not enforced by the store)
METADATA_KEYS = ("assignee", "dueDate", "category")

# Conventional priority range (not enforced by the store)
PRIORITY_MIN = 1
PRIORITY_MAX = 5


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Fixed-width UTC timestamp, sorts lexicographically."""
    return value.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp from the table."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class Task:
    """
    A task record.

    Attributes:
        id: Unique identifier (UUID), assigned once at creation
        title: Task title, never empty
        priority: Priority, 1-5 by convention
        completed: Completion flag
        tags: Ordered list of tags, duplicates allowed
        metadata: String map (assignee, dueDate, category, or anything else)
        created_at: When the task was created
        updated_at: When last updated, None until the first update
    """

    title: str
    id: str = field(default_factory=lambda: str(uuid4()))
    priority: Union[int, float] = DEFAULT_PRIORITY
    completed: bool = False
    tags: List[Any] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if self.created_at is None:
            self.created_at = utcnow()

    @property
    def assignee(self) -> Optional[str]:
        return self.metadata.get("assignee")

    @property
    def due_date(self) -> Optional[str]:
        return self.metadata.get("dueDate")

    @property
    def category(self) -> Optional[str]:
        return self.metadata.get("category")

    def to_dict(self) -> dict:
        """Convert to the persisted wire layout."""
        data = {
            "id": self.id,
            "title": self.title,
            "priority": self.priority,
            "completed": self.completed,
            "tags": list(self.tags),
            "metadata": dict(self.metadata),
            "createdAt": format_timestamp(self.created_at),
        }
        if self.updated_at is not None:
            data["updatedAt"] = format_timestamp(self.updated_at)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        """Create Task from a table item."""
        tags = data.get("tags") or []
        metadata = data.get("metadata") or {}

        # SQLite rows may carry nested values as JSON text
        if isinstance(tags, str):
            tags = json.loads(tags)
        if isinstance(metadata, str):
            metadata = json.loads(metadata)

        priority = data.get("priority", DEFAULT_PRIORITY)
        if isinstance(priority, Decimal):
            priority = to_number(priority)

        return cls(
            id=data.get("id"),
            title=data.get("title", ""),
            priority=priority,
            completed=bool(data.get("completed", False)),
            tags=list(tags),
            metadata=dict(metadata),
            created_at=parse_timestamp(data.get("createdAt")),
            updated_at=parse_timestamp(data.get("updatedAt")),
        )
