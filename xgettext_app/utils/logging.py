# FILE: xgettext_app/utils/logging.py
"""
Unified logging helpers for Xgettext App

- Creates one process-wide application logger writing to stderr, plus an
  optional size-rotated log file.
- Level order: explicit argument (--log-level), the environment
  ("XGETTEXT_LOG_LEVEL"), the task config file ("log_level"), then INFO.
- Provides a compact JSON helper for log lines.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Any, Optional

LOG_LEVEL_ENV = "XGETTEXT_LOG_LEVEL"
LOG_FORMAT = "%(levelname)s: %(message)s"
FILE_LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s: %(message)s"


# ---------------------------
# Level helpers
# ---------------------------

def _level_from_string(level_str: str) -> int:
    """Map string level to logging constant; defaults to INFO on unknown."""
    level = getattr(logging, str(level_str).upper(), None)
    if isinstance(level, int):
        return level
    return logging.INFO


def resolve_level(
    explicit: Optional[str] = None, configured: Optional[str] = None, default: int = logging.INFO
) -> int:
    """Pick the effective level: explicit argument, environment, config value, default."""
    val = explicit or os.environ.get(LOG_LEVEL_ENV) or configured
    return _level_from_string(val) if val else default


# ---------------------------
# Public logger factory
# ---------------------------

def get_xgettext_logger(
    name: str = "xgettext_app",
    *,
    level: Optional[str] = None,
    config_level: Optional[str] = None,
    log_file: Optional[str] = None,
    file_count: int = 5,
    max_bytes: int = 1024 * 1024,
    default_level: int = logging.INFO,
) -> logging.Logger:
    """
    Create or return the application logger.

    A stderr handler is attached once; calling again with ``log_file`` adds a
    rotating file handler for that path unless one is already attached.
    """
    logger = logging.getLogger(name)
    if not any(getattr(h, "_xgettext_stream", False) for h in logger.handlers):
        h = logging.StreamHandler()
        h.setFormatter(logging.Formatter(LOG_FORMAT))
        h._xgettext_stream = True  # type: ignore[attr-defined]
        logger.addHandler(h)
        logger.propagate = False

    if log_file:
        path = os.path.abspath(log_file)
        attached = any(
            isinstance(h, RotatingFileHandler) and getattr(h, "baseFilename", None) == path
            for h in logger.handlers
        )
        if not attached:
            os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
            fh = RotatingFileHandler(path, maxBytes=max_bytes, backupCount=file_count, encoding="utf-8")
            fh.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
            logger.addHandler(fh)

    logger.setLevel(resolve_level(level, config_level, default=default_level))
    return logger


# Singleton logger used across the app
xgettext_logger = get_xgettext_logger()


# ---------------------------
# Format utilities
# ---------------------------

def compact_json(obj: Any, limit: int = 1200) -> str:
    """Compact JSON string for logging; truncate if too long."""
    import json
    try:
        s = json.dumps(obj, ensure_ascii=False, separators=(",", ":"), sort_keys=True)
    except (TypeError, ValueError):
        s = str(obj)
    return s if len(s) <= limit else s[:limit] + "…(truncated)"
