"""
Logging setup for tasktable entry points.

Library modules only call logging.getLogger(__name__); the CLI configures
the root logger once. Output goes to stderr because the MCP stdio
transport owns stdout.
"""

import logging
import sys
from typing import Union

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def setup_logging(level: Union[int, str] = logging.INFO) -> None:
    """Install one stderr handler on the root logger."""
    root = logging.getLogger()
    if root.handlers:
        return  # already configured
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    root.setLevel(level)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
