"""
Pytest configuration and fixtures for tasktable tests.
"""

import pytest
import sys
from pathlib import Path

# Add packages to path for testing
packages_dir = Path(__file__).parent.parent / "packages"
sys.path.insert(0, str(packages_dir / "tasktable-core"))
sys.path.insert(0, str(packages_dir / "tasktable-mcp"))


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory."""
    config_dir = tmp_path / ".tasktable"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def sample_task_fields():
    """Sample create fields for testing."""
    return {
        "title": "Ship release",
        "priority": 2,
        "completed": False,
        "tags": ["urgent", "backend"],
        "metadata": {"assignee": "Alice", "dueDate": "2026-11-01", "category": "ops"},
    }


@pytest.fixture
async def sqlite_adapter(tmp_path):
    """A connected SQLite adapter with a provisioned Tasks table."""
    from tasktable.db.sqlite import SQLiteAdapter

    adapter = SQLiteAdapter(str(tmp_path / "test.db"))
    await adapter.connect()
    await adapter.ensure_table()

    yield adapter

    await adapter.close()


@pytest.fixture
async def task_store(sqlite_adapter):
    """A TaskStore backed by a temporary SQLite table."""
    from tasktable.services.tasks import TaskStore

    return TaskStore(adapter=sqlite_adapter)
