"""
Business logic services for tasktable.
"""

from tasktable.services.tasks import TaskStore
from tasktable.services.updates import UpdateBuilder

__all__ = [
    "TaskStore",
    "UpdateBuilder",
]
