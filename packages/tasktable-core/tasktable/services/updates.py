"""
Partial-update builder.

Stages one assignment per field the caller actually supplied. The staged
mapping is all a backend ever writes, so untouched attributes are never
resent.
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Dict

from tasktable.codec import MUTABLE_FIELDS, coerce_field
from tasktable.models.task import format_timestamp

UPDATED_AT = "updatedAt"


class UpdateBuilder:
    """Accumulates field name -> new value for one conditional update."""

    def __init__(self):
        self._assignments: Dict[str, Any] = {}

    @classmethod
    def from_fields(cls, fields: Mapping) -> "UpdateBuilder":
        """
        Stage every mutable field present in fields.

        A field is present when its key is there and its value is not None.
        Values are coerced through the attribute codec.
        """
        builder = cls()
        for name in MUTABLE_FIELDS:
            value = fields.get(name)
            if value is not None:
                builder.stage(name, coerce_field(name, value))
        return builder

    def stage(self, name: str, value: Any) -> "UpdateBuilder":
        self._assignments[name] = value
        return self

    def touch(self, when: datetime) -> "UpdateBuilder":
        """Stage the updatedAt timestamp."""
        return self.stage(UPDATED_AT, format_timestamp(when))

    @property
    def field_count(self) -> int:
        """Staged fields, not counting updatedAt."""
        return sum(1 for name in self._assignments if name != UPDATED_AT)

    @property
    def assignments(self) -> Dict[str, Any]:
        return dict(self._assignments)

    def __contains__(self, name: str) -> bool:
        return name in self._assignments

    def __getitem__(self, name: str) -> Any:
        return self._assignments[name]

    def __len__(self) -> int:
        return len(self._assignments)

    def __repr__(self) -> str:
        return f"UpdateBuilder({self._assignments!r})"
