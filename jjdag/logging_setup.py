"""File logging setup.

The terminal is in raw mode while the UI runs, so records go to a rotating
file under the platform log directory instead of stderr.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path

from platformdirs import user_log_dir

APP_NAME = "jjdag"
LOG_FILENAME = "jjdag.log"
LOG_ENV_VAR = "JJDAG_LOG"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DEFAULT_LEVEL = "WARNING"
MAX_LOG_BYTES = 1_000_000
BACKUP_COUNT = 3


def default_log_path() -> Path:
    return Path(user_log_dir(APP_NAME, appauthor=False)) / LOG_FILENAME


def resolve_log_level(cli_level: str | None, config_level: str | None) -> int:
    """Pick the first valid level from CLI, ``$JJDAG_LOG``, then config."""
    for candidate in (cli_level, os.environ.get(LOG_ENV_VAR), config_level):
        if not candidate:
            continue
        level = logging.getLevelName(candidate.strip().upper())
        if isinstance(level, int):
            return level
    return logging.getLevelName(DEFAULT_LEVEL)


def setup_logging(level: int, log_path: Path | None = None) -> Path | None:
    """Attach a rotating file handler to the ``jjdag`` logger.

    Returns the log path, or ``None`` when the log directory is not writable
    (logging then stays disabled rather than failing startup).
    """
    path = log_path if log_path is not None else default_log_path()
    logger = logging.getLogger(APP_NAME)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        if getattr(handler, "_jjdag_handler", False):
            logger.removeHandler(handler)
            handler.close()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.handlers.RotatingFileHandler(
            path,
            maxBytes=MAX_LOG_BYTES,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
        )
    except OSError:
        logger.addHandler(logging.NullHandler())
        return None
    handler._jjdag_handler = True  # type: ignore[attr-defined]
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
    return path
