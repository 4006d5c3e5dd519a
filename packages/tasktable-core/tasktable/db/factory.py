"""
Table adapter factory.

Creates the appropriate adapter based on configuration.
"""

import logging

from tasktable.db.interface import TableAdapter

logger = logging.getLogger(__name__)

# Global adapter instance (singleton pattern)
_adapter: TableAdapter | None = None


def get_adapter(config=None) -> TableAdapter:
    """
    Get or create the table adapter based on configuration.

    Uses singleton pattern - returns same adapter instance on subsequent calls.

    Args:
        config: Optional TasktableConfig. If not provided, loads from default location.

    Returns:
        TableAdapter instance (SQLiteAdapter, PostgresAdapter or DynamoDBAdapter)

    Raises:
        ValueError: If table configuration is invalid
    """
    global _adapter

    if _adapter is not None:
        return _adapter

    # Load config if not provided
    if config is None:
        from tasktable.config import load_config
        config = load_config()

    backend = config.table.backend.lower()
    table = config.table.name

    if backend == "postgres" or backend == "postgresql":
        from tasktable.db.postgres import PostgresAdapter

        url = config.table.postgres_url
        if not url:
            raise ValueError(
                "PostgreSQL URL not configured. "
                "Set table.postgres.url in config or TASKTABLE_DATABASE_URL env var."
            )

        _adapter = PostgresAdapter(url, table=table)
        logger.info("Using PostgreSQL adapter")

    elif backend == "sqlite":
        from tasktable.db.sqlite import SQLiteAdapter

        path = config.table.sqlite_path
        _adapter = SQLiteAdapter(path, table=table)
        logger.info(f"Using SQLite adapter: {path}")

    elif backend == "dynamodb":
        from tasktable.db.dynamodb import DynamoDBAdapter

        _adapter = DynamoDBAdapter(
            table=table,
            region=config.table.region,
            endpoint_url=config.table.endpoint_url,
        )
        logger.info(f"Using DynamoDB adapter: {table} ({config.table.region})")

    else:
        raise ValueError(
            f"Unknown table backend: {backend}. "
            "Use 'sqlite', 'postgres' or 'dynamodb'."
        )

    return _adapter


async def init_adapter(config=None) -> TableAdapter:
    """
    Initialize the table adapter and connect.

    Args:
        config: Optional TasktableConfig

    Returns:
        Connected TableAdapter instance
    """
    adapter = get_adapter(config)
    await adapter.connect()
    return adapter


async def close_adapter() -> None:
    """Close the global adapter connection."""
    global _adapter

    if _adapter is not None:
        await _adapter.close()
        _adapter = None


def reset_adapter() -> None:
    """
    Reset the global adapter instance.

    Useful for testing or when configuration changes.
    """
    global _adapter
    _adapter = None
