"""
Optional strict validation policy.

The store itself only coerces. A policy, when configured, runs on the
coerced values before anything reaches the table.
"""

from typing import Any, Dict

from tasktable.errors import ValidationError
from tasktable.models.task import METADATA_KEYS, PRIORITY_MAX, PRIORITY_MIN


class StrictTaskPolicy:
    """
    Rejects values the UI would never send.

    - priority must be a whole number within 1-5
    - metadata keys must be assignee, dueDate or category, with string values
    """

    def __init__(self, metadata_keys=METADATA_KEYS,
                 priority_min: int = PRIORITY_MIN, priority_max: int = PRIORITY_MAX):
        self.metadata_keys = tuple(metadata_keys)
        self.priority_min = priority_min
        self.priority_max = priority_max

    def check(self, values: Dict[str, Any]) -> None:
        """
        Validate coerced field values (a create item or staged assignments).

        Raises:
            ValidationError: A value breaks the policy
        """
        if "priority" in values:
            self._check_priority(values["priority"])
        if "metadata" in values:
            self._check_metadata(values["metadata"])

    def _check_priority(self, priority: Any) -> None:
        if not isinstance(priority, int) or not (
            self.priority_min <= priority <= self.priority_max
        ):
            raise ValidationError(
                f"priority must be an integer from {self.priority_min} to {self.priority_max}"
            )

    def _check_metadata(self, metadata: Dict[str, Any]) -> None:
        unknown = sorted(k for k in metadata if k not in self.metadata_keys)
        if unknown:
            raise ValidationError(
                f"Unknown metadata keys: {', '.join(unknown)}. "
                f"Allowed: {', '.join(self.metadata_keys)}"
            )
        for key, value in metadata.items():
            if not isinstance(value, str):
                raise ValidationError(f"metadata.{key} must be a string")
