"""Logging utilities for the listbox engine."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from typing import Optional, Union

logger = logging.getLogger("listbox_engine")

LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(threadName)s] - %(message)s"


def level_from_name(name: str, default: int = logging.INFO) -> int:
    """Translate a level name such as ``"debug"`` to its numeric value."""

    value = logging.getLevelName(name.strip().upper())
    return value if isinstance(value, int) else default


def configure_logging(
    *,
    level: Union[int, str] = logging.INFO,
    handler: Optional[logging.Handler] = None,
    log_file: str = "listbox_engine.log",
    max_bytes: int = 1024 * 1024,
    backup_count: int = 3,
    target_logger: Optional[logging.Logger] = None,
    replace_handlers: bool = True,
) -> logging.Logger:
    """Attach ``handler`` to the engine logger and stop propagation.

    ``level`` may be numeric or a name as stored in ``listbox.ini``
    (``"DEBUG"``, ``"warning"``); unknown names fall back to INFO. Without a
    handler, records go to a rotating ``log_file`` of ``max_bytes`` with
    ``backup_count`` backups. Importing this module never attaches handlers,
    so hosts that configure logging themselves see records through
    propagation until this function runs.
    """

    configured_logger = target_logger or logger
    if isinstance(level, str):
        level = level_from_name(level)

    if handler is None:
        handler = RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    if replace_handlers:
        configured_logger.handlers.clear()

    configured_logger.addHandler(handler)
    configured_logger.setLevel(level)
    configured_logger.propagate = False
    return configured_logger


__all__ = ["LOG_FORMAT", "logger", "configure_logging", "level_from_name"]
