"""Per-category log sink.

Every event is mirrored to the console and, when the log directory is
usable, appended as a single line to `<log_dir>/<category>.log`. The
directory is set up once at startup; if it cannot be created the process
keeps running with console logging only.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from .config import Settings

CATEGORIES = ("general", "calls", "webhooks", "errors", "server")

ROOT_LOGGER = "call_bridge"
CATEGORY_PREFIX = f"{ROOT_LOGGER}.log"

_log_dir: Optional[Path] = None
_configured = False


class _CategoryFilter(logging.Filter):
    """Tag records with the category derived from the logger name."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "category"):
            prefix = CATEGORY_PREFIX + "."
            if record.name.startswith(prefix):
                record.category = record.name[len(prefix):]
            else:
                record.category = "general"
        return True


def category_logger(category: str) -> logging.Logger:
    """Return the logger that writes to the given category's file."""
    if category not in CATEGORIES:
        category = "general"
    return logging.getLogger(f"{CATEGORY_PREFIX}.{category}")


def log_dir() -> Optional[Path]:
    """Directory in use for log files, or None when logging console-only."""
    return _log_dir


def configure_logging(settings: Settings, level: int = logging.INFO) -> Optional[Path]:
    """Attach console and file handlers. Safe to call more than once."""
    global _log_dir, _configured

    if _configured:
        return _log_dir

    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(level)

    console = logging.StreamHandler()
    console.addFilter(_CategoryFilter())
    console.setFormatter(logging.Formatter("[%(asctime)s] [%(category)s] %(message)s"))
    root.addHandler(console)

    directory = Path(settings.log_dir)
    try:
        directory.mkdir(parents=True, exist_ok=True)
        if not os.access(directory, os.W_OK):
            raise PermissionError(f"{directory} is not writable")
    except OSError as exc:
        root.warning("Unable to create logs directory, will log to console only: %s", exc)
        directory = None

    if directory is not None:
        file_format = logging.Formatter("[%(asctime)s] %(message)s")
        for category in CATEGORIES:
            handler = logging.FileHandler(directory / f"{category}.log", mode="a", encoding="utf-8")
            handler.setFormatter(file_format)
            category_logger(category).addHandler(handler)

    _log_dir = directory
    _configured = True
    return _log_dir


def reset_logging() -> None:
    """Detach every handler added by `configure_logging`."""
    global _log_dir, _configured

    loggers = [logging.getLogger(ROOT_LOGGER)] + [category_logger(c) for c in CATEGORIES]
    for logger in loggers:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

    _log_dir = None
    _configured = False
