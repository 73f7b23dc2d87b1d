"""
Logging setup for the API process.

``setup_logging`` reads the level and the optional log file from
``settings`` (``LOG_LEVEL``, ``LOG_FILE``, ``DEBUG``) unless they are
passed explicitly, and configures the root logger once.  Request lines
come from the middleware in ``main``, so uvicorn's own access log is
quietened.
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from .config import settings


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5

QUIET_LOGGERS = ("uvicorn.access",)


def resolve_level(level: Optional[str] = None) -> int:
    """Map a level name to its numeric value.

    ``DEBUG=true`` in the environment always wins; unknown names fall
    back to ``INFO``.
    """
    if settings.debug:
        return logging.DEBUG
    name = (level or settings.log_level).upper()
    numeric = logging.getLevelName(name)
    return numeric if isinstance(numeric, int) else logging.INFO


def setup_logging(level: Optional[str] = None, logfile: Optional[str] = None) -> None:
    root = logging.getLogger()
    if root.handlers:
        # Already configured, e.g. by pytest or a repeated ``create_app``.
        return

    root.setLevel(resolve_level(level))
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers = [logging.StreamHandler()]
    logfile = logfile or settings.log_file
    if logfile:
        handlers.append(
            RotatingFileHandler(
                Path(logfile).resolve(),
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_FILE_BACKUPS,
                encoding="utf-8",
            )
        )
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(
        "Logging configured for %s (%s)", settings.project_name, settings.environment
    )
