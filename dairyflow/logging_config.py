"""Process-wide logging setup.

Modules ask for a logger at import time, before settings are loaded, so the
root handler is installed on first use and the level stays adjustable.
``app.py`` calls :func:`init_logging` again with the configured level.
"""

from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# chatty third-party loggers, capped at WARNING
QUIET_LOGGERS = ("urllib3", "watchdog")

_handler_installed = False


def resolve_level(level: str | int | None = None) -> int:
    if level is None:
        level = os.getenv("DAIRYFLOW_LOG_LEVEL", "INFO")
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).strip().upper())
    return value if isinstance(value, int) else logging.INFO


def init_logging(level: str | int | None = None) -> None:
    """Install the root handler once; an explicit ``level`` always applies."""
    global _handler_installed
    root = logging.getLogger()
    if not _handler_installed:
        logging.basicConfig(format=LOG_FORMAT)
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
        _handler_installed = True
        root.setLevel(resolve_level(level))
    elif level is not None:
        root.setLevel(resolve_level(level))


def get_logger(name: str) -> logging.Logger:
    if not _handler_installed:
        init_logging()
    return logging.getLogger(name)
