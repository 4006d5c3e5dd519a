"""
Table abstraction layer supporting SQLite, PostgreSQL and DynamoDB.
"""

from tasktable.db.factory import close_adapter, get_adapter, init_adapter, reset_adapter
from tasktable.db.interface import ConditionFailed, TableAdapter

__all__ = [
    "TableAdapter",
    "ConditionFailed",
    "get_adapter",
    "init_adapter",
    "close_adapter",
    "reset_adapter",
]
