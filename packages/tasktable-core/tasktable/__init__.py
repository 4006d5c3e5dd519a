"""
tasktable Core Library

Task records over a schema-less key-value table (SQLite, PostgreSQL or DynamoDB).
"""

__version__ = "0.1.0"

from tasktable.config import TasktableConfig, load_config
from tasktable.db import TableAdapter, get_adapter
from tasktable.errors import NotFoundError, StoreError, TasktableError, ValidationError

__all__ = [
    "load_config",
    "TasktableConfig",
    "get_adapter",
    "TableAdapter",
    "TasktableError",
    "ValidationError",
    "NotFoundError",
    "StoreError",
]
