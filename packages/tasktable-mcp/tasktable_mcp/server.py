"""
tasktable MCP Server

Exposes the task record store as MCP tools. Every tool returns a dict with an
HTTP-style "status" so clients can tell created, not found and failed apart.
"""

import asyncio
import logging
from typing import Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from tasktable.errors import NotFoundError, StoreError, ValidationError

# Initialize FastMCP server
mcp = FastMCP("tasktable")

logger = logging.getLogger(__name__)

# Global state
_initialized = False


async def ensure_initialized():
    """Ensure the table adapter is connected (and the table provisioned)."""
    global _initialized
    if _initialized:
        return

    from tasktable.db import init_adapter
    from tasktable.config import get_config

    try:
        config = get_config()
        adapter = await init_adapter(config)
        if config.table.auto_provision:
            await adapter.ensure_table()
    except Exception as e:
        logger.error(f"Failed to initialize table: {e}")
        raise StoreError.wrap("Failed to connect to table", e) from e

    _initialized = True
    logger.info(f"tasktable initialized ({adapter.backend}: {adapter.table_name})")


def get_store():
    """Build a TaskStore on the global adapter with the configured policy."""
    from tasktable.config import get_config
    from tasktable.policy import StrictTaskPolicy
    from tasktable.services import TaskStore

    config = get_config()
    policy = StrictTaskPolicy() if config.validation.strict else None
    return TaskStore(policy=policy)


def _error(status: int, message: str, details: Optional[str] = None) -> dict:
    result = {"status": status, "error": message}
    if details:
        result["details"] = details
    return result


def _failure(e: Exception) -> dict:
    """Map a store error to a structured response."""
    if isinstance(e, ValidationError):
        return _error(400, e.message)
    if isinstance(e, NotFoundError):
        return _error(404, "Task not found")
    if isinstance(e, StoreError):
        return _error(500, e.message, e.detail)
    raise e


# =============================================================================
# TASK TOOLS
# =============================================================================

@mcp.tool()
async def task_create(
    title: str,
    priority: Optional[int] = None,
    completed: Optional[bool] = None,
    tags: Optional[List[str]] = None,
    metadata: Optional[Dict[str, str]] = None,
) -> dict:
    """
    Create a new task.

    Args:
        title: Task title (required, not blank)
        priority: Priority 1-5 (default 3)
        completed: Completion flag (default false)
        tags: List of tags
        metadata: Map with assignee, dueDate, category

    Returns:
        status 201 with the created task, or status 400/500 with an error
    """
    try:
        await ensure_initialized()
        store = get_store()
        task = await store.create({
            "title": title,
            "priority": priority,
            "completed": completed,
            "tags": tags,
            "metadata": metadata,
        })
    except (ValidationError, StoreError) as e:
        return _failure(e)

    return {"status": 201, "message": "Task created", "task": task.to_dict()}


@mcp.tool()
async def task_read() -> dict:
    """
    List every task.

    Returns:
        status 200 with tasks and count, or status 500 with an error
    """
    try:
        await ensure_initialized()
        store = get_store()
        tasks = await store.read_all()
    except StoreError as e:
        return _failure(e)

    return {
        "status": 200,
        "tasks": [t.to_dict() for t in tasks],
        "count": len(tasks),
    }


@mcp.tool()
async def task_update(
    task_id: str,
    title: Optional[str] = None,
    priority: Optional[int] = None,
    completed: Optional[bool] = None,
    tags: Optional[List[str]] = None,
    metadata: Optional[Dict[str, str]] = None,
) -> dict:
    """
    Update only the given fields of an existing task.

    Args:
        task_id: Task UUID
        title: New title
        priority: New priority
        completed: New completion flag
        tags: New tags (replaces the list)
        metadata: New metadata (replaces the map)

    Returns:
        status 200 with the updated task, or status 400/404/500 with an error
    """
    try:
        await ensure_initialized()
        store = get_store()
        task = await store.update(task_id, {
            "title": title,
            "priority": priority,
            "completed": completed,
            "tags": tags,
            "metadata": metadata,
        })
    except (ValidationError, NotFoundError, StoreError) as e:
        return _failure(e)

    return {"status": 200, "message": "Task updated", "task": task.to_dict()}


@mcp.tool()
async def task_delete(task_id: str) -> dict:
    """
    Permanently delete a task.

    Args:
        task_id: Task UUID

    Returns:
        status 200 with the deleted id, or status 400/404/500 with an error
    """
    try:
        await ensure_initialized()
        store = get_store()
        deleted = await store.delete(task_id)
    except (ValidationError, NotFoundError, StoreError) as e:
        return _failure(e)

    return {"status": 200, "message": "Task deleted", "id": deleted}


# =============================================================================
# UTILITY TOOLS
# =============================================================================

@mcp.tool()
async def task_provision() -> dict:
    """
    Create the task table if it does not exist.

    Returns:
        Whether the table was created
    """
    try:
        await ensure_initialized()
        store = get_store()
        created = await store.provision()
    except StoreError as e:
        return _failure(e)

    return {
        "status": 201 if created else 200,
        "table": store.adapter.table_name,
        "created": created,
    }


@mcp.tool()
async def task_health() -> dict:
    """
    Check table connectivity.

    Returns:
        Health status including backend and table name
    """
    from tasktable.config import get_config
    from tasktable.db import get_adapter

    try:
        await ensure_initialized()
    except StoreError as e:
        config = get_config()
        return {
            "status": 503,
            "health": "unhealthy",
            "backend": config.backend,
            "table": config.table.name,
            "details": e.detail,
        }

    adapter = get_adapter()

    try:
        connected = await adapter.ping()
    except Exception as e:
        connected = False
        logger.error(f"Health check failed: {e}")

    return {
        "status": 200 if connected else 503,
        "health": "healthy" if connected else "unhealthy",
        "backend": adapter.backend,
        "table": adapter.table_name,
    }


# =============================================================================
# CLI ENTRY POINT
# =============================================================================

def main():
    """Main entry point for tasktable-mcp command."""
    import argparse

    from tasktable.config import get_config
    from tasktable.logging_config import setup_logging

    parser = argparse.ArgumentParser(description="tasktable MCP Server")
    parser.add_argument("command", nargs="?", default="serve",
                        choices=["serve", "provision"],
                        help="Command to run (serve, provision)")
    args = parser.parse_args()

    setup_logging(get_config().logging.level)

    if args.command == "provision":
        # One-time table creation, without the auto-provision in ensure_initialized
        async def do_provision() -> bool:
            from tasktable.db import close_adapter, init_adapter

            await init_adapter(get_config())
            try:
                return await get_store().provision()
            finally:
                await close_adapter()

        try:
            created = asyncio.run(do_provision())
        except StoreError as e:
            logger.error(f"Provisioning failed: {e.detail or e.message}")
            raise SystemExit(1)

        table = get_config().table.name
        print(f"Table {table}: {'created' if created else 'already exists'}")
    else:
        # Start MCP server
        mcp.run()


if __name__ == "__main__":
    main()
