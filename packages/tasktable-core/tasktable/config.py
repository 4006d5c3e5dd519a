"""
tasktable Configuration

Loads settings from ~/.tasktable/config.yaml with environment variable overrides.
Supports SQLite, PostgreSQL and DynamoDB table backends.
"""

from __future__ import annotations
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional
import os
import logging

import yaml

from tasktable.errors import redact

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".tasktable"
CONFIG_FILE = CONFIG_DIR / "config.yaml"

BACKENDS = ("sqlite", "postgres", "dynamodb")

_TRUTHY = ("1", "true", "yes", "on")


@dataclass
class TableConfig:
    """Table backend settings."""

    backend: str = "sqlite"  # "sqlite", "postgres" or "dynamodb"
    name: str = "Tasks"
    sqlite_path: str = "~/.tasktable/tasktable.db"
    postgres_url: Optional[str] = None
    region: str = "us-east-1"
    endpoint_url: Optional[str] = None
    auto_provision: bool = True


@dataclass
class ValidationConfig:
    """Optional strict validation on top of the permissive codec."""

    strict: bool = False


@dataclass
class LoggingConfig:
    level: str = "INFO"


@dataclass
class TasktableConfig:
    """
    Complete tasktable configuration.

    Loaded from ~/.tasktable/config.yaml with environment variable overrides.
    """

    table: TableConfig = field(default_factory=TableConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def backend(self) -> str:
        return self.table.backend.lower()

    def to_dict(self) -> dict:
        """Convert to dictionary for display (masks secrets)."""
        result = asdict(self)

        # Mask database URL
        if result.get("table", {}).get("postgres_url"):
            result["table"]["postgres_url"] = redact(result["table"]["postgres_url"])

        return result


def _parse_table_config(data: dict) -> TableConfig:
    """Parse table configuration from YAML data."""
    table_data = data.get("table") or {}

    sqlite_config = table_data.get("sqlite") or {}
    postgres_config = table_data.get("postgres") or {}
    dynamodb_config = table_data.get("dynamodb") or {}

    postgres_url = postgres_config.get("url")

    # Check for URL from environment variable reference
    url_env = postgres_config.get("url_env")
    if url_env and not postgres_url:
        postgres_url = os.environ.get(url_env)

    return TableConfig(
        backend=table_data.get("backend", "sqlite"),
        name=table_data.get("name", "Tasks"),
        sqlite_path=sqlite_config.get("path", "~/.tasktable/tasktable.db"),
        postgres_url=postgres_url,
        region=dynamodb_config.get("region", "us-east-1"),
        endpoint_url=dynamodb_config.get("endpoint_url"),
        auto_provision=bool(table_data.get("auto_provision", True)),
    )


def _parse_validation_config(data: dict) -> ValidationConfig:
    validation_data = data.get("validation") or {}
    return ValidationConfig(strict=bool(validation_data.get("strict", False)))


def _parse_logging_config(data: dict) -> LoggingConfig:
    logging_data = data.get("logging") or {}
    return LoggingConfig(level=str(logging_data.get("level", "INFO")).upper())


def load_config(config_path: Optional[Path] = None) -> TasktableConfig:
    """
    Load configuration from file with environment variable overrides.

    Args:
        config_path: Optional path to config file. Defaults to ~/.tasktable/config.yaml

    Returns:
        TasktableConfig instance
    """
    config_file = config_path or CONFIG_FILE
    config = TasktableConfig()

    if config_file.exists():
        try:
            with open(config_file, 'r') as f:
                data = yaml.safe_load(f) or {}

            config.table = _parse_table_config(data)
            config.validation = _parse_validation_config(data)
            config.logging = _parse_logging_config(data)

        except yaml.YAMLError as e:
            logger.warning(f"Could not parse config file at {config_file}: {e}")
        except OSError as e:
            logger.warning(f"Could not read config file at {config_file}: {e}")

    # Environment variable overrides
    if os.environ.get("TASKTABLE_DATABASE_URL"):
        config.table.backend = "postgres"
        config.table.postgres_url = os.environ["TASKTABLE_DATABASE_URL"]

    if os.environ.get("TASKTABLE_BACKEND"):
        config.table.backend = os.environ["TASKTABLE_BACKEND"].lower()

    if os.environ.get("TASKTABLE_TABLE"):
        config.table.name = os.environ["TASKTABLE_TABLE"]
    elif os.environ.get("DYNAMODB_TABLE"):
        config.table.name = os.environ["DYNAMODB_TABLE"]

    if os.environ.get("TASKTABLE_SQLITE_PATH"):
        config.table.sqlite_path = os.environ["TASKTABLE_SQLITE_PATH"]

    if os.environ.get("AWS_REGION"):
        config.table.region = os.environ["AWS_REGION"]

    if os.environ.get("TASKTABLE_DYNAMODB_ENDPOINT"):
        config.table.endpoint_url = os.environ["TASKTABLE_DYNAMODB_ENDPOINT"]

    if os.environ.get("TASKTABLE_STRICT_VALIDATION"):
        config.validation.strict = os.environ["TASKTABLE_STRICT_VALIDATION"].lower() in _TRUTHY

    if os.environ.get("TASKTABLE_LOG_LEVEL"):
        config.logging.level = os.environ["TASKTABLE_LOG_LEVEL"].upper()

    return config


def save_config(config: TasktableConfig, config_path: Optional[Path] = None) -> None:
    """
    Save configuration to file.

    Args:
        config: TasktableConfig instance to save
        config_path: Optional path to config file. Defaults to ~/.tasktable/config.yaml
    """
    config_file = config_path or CONFIG_FILE

    # Ensure config directory exists
    config_file.parent.mkdir(parents=True, exist_ok=True)

    table = config.table
    data = {
        "table": {
            "backend": table.backend,
            "name": table.name,
            "auto_provision": table.auto_provision,
        },
        "validation": {"strict": config.validation.strict},
        "logging": {"level": config.logging.level},
    }

    # Add backend-specific config
    if table.backend == "sqlite":
        data["table"]["sqlite"] = {"path": table.sqlite_path}
    elif table.backend == "dynamodb":
        data["table"]["dynamodb"] = {"region": table.region}
        if table.endpoint_url:
            data["table"]["dynamodb"]["endpoint_url"] = table.endpoint_url
    elif table.postgres_url:
        data["table"]["postgres"] = {"url": table.postgres_url}

    with open(config_file, 'w') as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    # Secure permissions (readable only by owner)
    config_file.chmod(0o600)

    logger.info(f"Configuration saved to {config_file}")


# Cached config instance
_config: Optional[TasktableConfig] = None


def get_config() -> TasktableConfig:
    """Get cached config instance, loading if needed."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config() -> TasktableConfig:
    """Force reload config from file."""
    global _config
    _config = load_config()
    return _config
