"""
Abstract table adapter interface.

A table is a key-value store of task items keyed by "id". Adapters supply
unconditional puts, full scans, and the two atomic conditional writes the
store relies on for its existence checks.
"""

import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List

KEY_ATTRIBUTE = "id"

_TABLE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class ConditionFailed(Exception):
    """The record targeted by a conditional write does not exist."""

    def __init__(self, key: str):
        super().__init__(f"Conditional check failed for {KEY_ATTRIBUTE}={key}")
        self.key = key


def check_table_name(name: str) -> str:
    """Table names are interpolated into statements, so allow identifiers only."""
    if not _TABLE_NAME.match(name or ""):
        raise ValueError(f"Invalid table name: {name!r}")
    return name


class TableAdapter(ABC):
    """
    Abstract base class for table adapters.

    Implementations must support:
    - put: unconditional insert/overwrite keyed by id
    - scan_all: every item in the table
    - conditional_update / conditional_delete: atomic, only if the id exists
    - ensure_table: idempotent provisioning
    """

    @abstractmethod
    async def connect(self) -> None:
        """Initialize connection/pool/client."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release connection/pool/client."""
        pass

    @property
    @abstractmethod
    def backend(self) -> str:
        """Short backend name ("sqlite", "postgres", "dynamodb")."""
        pass

    @property
    @abstractmethod
    def table_name(self) -> str:
        pass

    @abstractmethod
    async def put(self, item: Dict[str, Any]) -> None:
        """
        Insert or overwrite an item.

        Args:
            item: Item in wire layout; must carry an "id"
        """
        pass

    @abstractmethod
    async def scan_all(self) -> List[Dict[str, Any]]:
        """
        Return every item in the table.

        No ordering guarantee and no isolation across items.
        """
        pass

    @abstractmethod
    async def conditional_update(
        self,
        key: str,
        assignments: Dict[str, Any],
    ) -> Dict[str, Any]:
        """
        Atomically set the named attributes if the item exists.

        Attributes not named in assignments are left untouched.

        Args:
            key: Item id
            assignments: Attribute name -> new value

        Returns:
            The full item as stored after the write

        Raises:
            ConditionFailed: No item with this id exists
        """
        pass

    @abstractmethod
    async def conditional_delete(self, key: str) -> None:
        """
        Atomically remove the item if it exists.

        Raises:
            ConditionFailed: No item with this id exists
        """
        pass

    @abstractmethod
    async def ensure_table(self) -> bool:
        """
        Create the table if it is missing.

        Only the key attribute is declared; every other attribute is
        schema-less.

        Returns:
            True if the table was created, False if it already existed
        """
        pass

    @abstractmethod
    async def ping(self) -> bool:
        """Check that the table is reachable."""
        pass
