"""
Task Record Store for tasktable.

Create, read-all, partial update and delete over any table backend. Update
and delete rely on the table's atomic existence check, never on a prior
read.
"""

import logging
from collections.abc import Mapping
from typing import Optional

from tasktable.codec import (
    DEFAULT_COMPLETED,
    DEFAULT_PRIORITY,
    to_boolean,
    to_number,
    to_string,
    to_string_list,
    to_string_map,
)
from tasktable.db import ConditionFailed, get_adapter
from tasktable.errors import NotFoundError, StoreError, ValidationError
from tasktable.models.task import Task, utcnow
from tasktable.services.updates import UpdateBuilder

logger = logging.getLogger(__name__)


class TaskStore:
    """
    Store for task records.

    Every operation is a single round trip to the table; failures are
    reported as ValidationError, NotFoundError or StoreError and never
    retried.
    """

    def __init__(self, adapter=None, policy=None):
        """
        Initialize task store.

        Args:
            adapter: Optional TableAdapter. If not provided, uses global adapter.
            policy: Optional validation policy (e.g. StrictTaskPolicy)
        """
        self._adapter = adapter
        self.policy = policy

    @property
    def adapter(self):
        """Get the table adapter."""
        if self._adapter is None:
            self._adapter = get_adapter()
        return self._adapter

    async def create(self, fields: Mapping) -> Task:
        """
        Create a new task.

        Args:
            fields: title (required), priority, completed, tags, metadata.
                    Any id/createdAt/updatedAt supplied is ignored.

        Returns:
            Created Task

        Raises:
            ValidationError: title missing or blank
            StoreError: the table write failed
        """
        title = fields.get("title")
        if title is None or not to_string(title).strip():
            raise ValidationError("title is required")

        priority = fields.get("priority")
        completed = fields.get("completed")

        task = Task(
            title=to_string(title),
            priority=DEFAULT_PRIORITY if priority is None else to_number(priority),
            completed=DEFAULT_COMPLETED if completed is None else to_boolean(completed),
            tags=to_string_list(fields.get("tags")),
            metadata=to_string_map(fields.get("metadata")),
        )
        item = task.to_dict()

        if self.policy is not None:
            self.policy.check(item)

        try:
            await self.adapter.put(item)
        except Exception as e:
            logger.error(f"Failed to create task {task.id}: {e}")
            raise StoreError.wrap("Failed to create task", e) from e

        logger.info(f"Created task: {task.id} - {task.title}")
        return task

    async def read_all(self) -> list[Task]:
        """
        Return every task in the table.

        Order is whatever the table returns; callers sort if they need to.
        """
        try:
            items = await self.adapter.scan_all()
        except Exception as e:
            logger.error(f"Failed to read tasks: {e}")
            raise StoreError.wrap("Failed to read tasks", e) from e

        return [Task.from_dict(item) for item in items]

    async def update(self, task_id: Optional[str], fields: Mapping) -> Task:
        """
        Update only the supplied fields of an existing task.

        Args:
            task_id: Task ID
            fields: Any of title, priority, completed, tags, metadata.
                    Missing or None values leave the stored field untouched.

        Returns:
            The task as stored after the update

        Raises:
            ValidationError: missing id, no fields, or blank title
            NotFoundError: no task with this id
            StoreError: the table write failed
        """
        if not task_id:
            raise ValidationError("id is required")

        builder = UpdateBuilder.from_fields(fields)
        if builder.field_count == 0:
            raise ValidationError("No fields to update provided")

        if "title" in builder and not builder["title"].strip():
            raise ValidationError("title must not be empty")

        if self.policy is not None:
            self.policy.check(builder.assignments)

        builder.touch(utcnow())

        try:
            item = await self.adapter.conditional_update(str(task_id), builder.assignments)
        except ConditionFailed:
            raise NotFoundError(f"Task not found: {task_id}")
        except Exception as e:
            logger.error(f"Failed to update task {task_id}: {e}")
            raise StoreError.wrap("Failed to update task", e) from e

        logger.info(f"Updated task: {task_id} ({', '.join(builder.assignments)})")
        return Task.from_dict(item)

    async def delete(self, task_id: Optional[str]) -> str:
        """
        Permanently delete a task.

        Returns:
            The deleted task ID

        Raises:
            ValidationError: missing id
            NotFoundError: no task with this id
            StoreError: the table delete failed
        """
        if not task_id:
            raise ValidationError("id is required")

        try:
            await self.adapter.conditional_delete(str(task_id))
        except ConditionFailed:
            raise NotFoundError(f"Task not found: {task_id}")
        except Exception as e:
            logger.error(f"Failed to delete task {task_id}: {e}")
            raise StoreError.wrap("Failed to delete task", e) from e

        logger.info(f"Deleted task: {task_id}")
        return str(task_id)

    async def complete(self, task_id: str) -> Task:
        """Mark a task as completed."""
        return await self.update(task_id, {"completed": True})

    async def provision(self) -> bool:
        """Create the backing table if it does not exist yet."""
        try:
            return await self.adapter.ensure_table()
        except Exception as e:
            logger.error(f"Failed to provision table: {e}")
            raise StoreError.wrap("Failed to provision table", e) from e

