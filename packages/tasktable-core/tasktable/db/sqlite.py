"""
SQLite table adapter using aiosqlite.

Each task is one row holding its id and the item as a JSON document:
- Partial updates use json_set() on the document
- Existence checks ride on the same UPDATE/DELETE statement (RETURNING)
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from tasktable.db.interface import (
    KEY_ATTRIBUTE,
    ConditionFailed,
    TableAdapter,
    check_table_name,
)

logger = logging.getLogger(__name__)

try:
    import aiosqlite
    HAS_AIOSQLITE = True
except ImportError:
    HAS_AIOSQLITE = False
    aiosqlite = None


class SQLiteAdapter(TableAdapter):
    """
    SQLite-backed task table.

    Uses aiosqlite for async database operations.
    Automatically creates the database file and parent directories.
    """

    def __init__(self, db_path: str = "~/.tasktable/tasktable.db", table: str = "Tasks"):
        """
        Initialize SQLite adapter.

        Args:
            db_path: Path to SQLite database file.
                    Supports ~ expansion for home directory.
            table: Table name
        """
        if not HAS_AIOSQLITE:
            raise RuntimeError(
                "aiosqlite not installed. Run: pip install tasktable"
            )

        self.db_path = Path(db_path).expanduser()
        self._table = check_table_name(table)
        self._conn: Optional[aiosqlite.Connection] = None

    @property
    def backend(self) -> str:
        return "sqlite"

    @property
    def table_name(self) -> str:
        return self._table

    async def connect(self) -> None:
        """Initialize database connection and create file if needed."""
        if self._conn is not None:
            return

        # Ensure parent directory exists
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        # Connect (creates file if doesn't exist)
        self._conn = await aiosqlite.connect(str(self.db_path))

        # Use WAL mode for better concurrent access
        await self._conn.execute("PRAGMA journal_mode = WAL")

        # Row factory to return dicts
        self._conn.row_factory = aiosqlite.Row

        logger.info(f"SQLite database connected: {self.db_path}")

    async def close(self) -> None:
        """Close database connection."""
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
            logger.info("SQLite connection closed")

    async def _get_conn(self) -> "aiosqlite.Connection":
        """Get or create connection."""
        if self._conn is None:
            await self.connect()
        return self._conn

    async def _execute(self, query: str, *args) -> int:
        """Execute a write and return the affected row count."""
        conn = await self._get_conn()
        cursor = await conn.execute(query, args)
        await conn.commit()
        return cursor.rowcount

    async def _execute_returning(self, query: str, *args) -> Optional[dict]:
        """Execute a write with a RETURNING clause and commit."""
        conn = await self._get_conn()
        cursor = await conn.execute(query, args)
        # Drain the statement before committing
        rows = await cursor.fetchall()
        await cursor.close()
        await conn.commit()
        return dict(rows[0]) if rows else None

    async def _fetch(self, query: str, *args) -> List[dict]:
        conn = await self._get_conn()
        cursor = await conn.execute(query, args)
        rows = await cursor.fetchall()
        return [dict(row) for row in rows]

    async def put(self, item: Dict[str, Any]) -> None:
        await self._execute(
            f"INSERT OR REPLACE INTO {self._table} (id, doc) VALUES (?, ?)",
            item[KEY_ATTRIBUTE], json.dumps(item),
        )

    async def scan_all(self) -> List[Dict[str, Any]]:
        rows = await self._fetch(f"SELECT doc FROM {self._table}")
        return [json.loads(row["doc"]) for row in rows]

    async def conditional_update(
        self,
        key: str,
        assignments: Dict[str, Any],
    ) -> Dict[str, Any]:
        """
        Set attributes with a single json_set() over the stored document.

        The WHERE clause is the existence check; no row back means no item.
        """
        set_args, params = render_json_set(assignments)
        row = await self._execute_returning(
            f"""
            UPDATE {self._table}
            SET doc = json_set(doc, {set_args})
            WHERE id = ?
            RETURNING doc
            """,
            *params, key,
        )
        if row is None:
            raise ConditionFailed(key)
        return json.loads(row["doc"])

    async def conditional_delete(self, key: str) -> None:
        deleted = await self._execute(
            f"DELETE FROM {self._table} WHERE id = ?", key,
        )
        if deleted == 0:
            raise ConditionFailed(key)

    async def ensure_table(self) -> bool:
        existing = await self._fetch(
            "SELECT name FROM sqlite_master WHERE type = 'table' AND name = ?",
            self._table,
        )
        if existing:
            logger.info(f"Table {self._table} already exists")
            return False

        await self._execute(
            f"""
            CREATE TABLE IF NOT EXISTS {self._table} (
                id TEXT PRIMARY KEY,
                doc TEXT NOT NULL
            )
            """
        )
        logger.info(f"Created table {self._table} in {self.db_path}")
        return True

    async def ping(self) -> bool:
        conn = await self._get_conn()
        cursor = await conn.execute("SELECT 1")
        row = await cursor.fetchone()
        return row is not None and row[0] == 1


def render_json_set(assignments: Dict[str, Any]) -> tuple:
    """
    Render assignments as json_set() path/value arguments.

    Values travel as JSON text wrapped in json() so lists, maps and
    booleans are stored as JSON values rather than strings.

    Returns:
        (argument SQL, parameters)
    """
    parts = []
    params = []
    for name, value in assignments.items():
        parts.append("?, json(?)")
        params.append(f'$."{name}"')
        params.append(json.dumps(value))
    return ", ".join(parts), params
