"""
Core data models for tasktable.
"""

from tasktable.models.task import Task

__all__ = [
    "Task",
]
