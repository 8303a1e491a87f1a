"""
Logging configuration.

Call configure_logging() once at app startup.
"""
import logging
import os
import sys
from typing import Optional

import config


def resolve_level(name: Optional[str] = None) -> int:
    """Map a level name (or the environment override) to a logging level."""
    name = name or os.environ.get("BATTERY_MONITOR_LOG_LEVEL") or config.LOG_LEVEL
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: Optional[int] = None) -> None:
    """Configure root logger with a single stderr handler."""
    fmt = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
    logging.basicConfig(
        level=level if level is not None else resolve_level(),
        format=fmt,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )
