"""Log file setup and crash reports.

Console output goes through :mod:`gistdrop.output`; this module only
configures the ``gistdrop`` logger hierarchy to write timestamped records to
``<data_dir>/logs/gistdrop.log``.  The context-menu handler runs without a
visible terminal on most desktops, so the log file is where failures end up.
"""

from __future__ import annotations

import logging
import traceback
from datetime import datetime
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
LOG_FILENAME = "gistdrop.log"

_handler: Optional[logging.Handler] = None

LOG_LEVELS: dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def configure_logging(level: str = "INFO", log_dir: Optional[Path] = None) -> Path:
    """Attach a file handler to the ``gistdrop`` logger.

    Calling this again replaces the previous handler, so repeated CLI
    invocations inside one process (tests) do not duplicate records.

    Args:
        level: Level name such as ``"DEBUG"`` or ``"INFO"``.  Unknown names
            fall back to ``INFO``.
        log_dir: Directory for the log file.  Defaults to
            :func:`~gistdrop.config.get_log_dir`.

    Returns:
        Path of the log file.
    """
    global _handler
    if log_dir is None:
        from gistdrop.config import get_log_dir

        log_dir = get_log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / LOG_FILENAME

    logger = logging.getLogger("gistdrop")
    if _handler is not None:
        logger.removeHandler(_handler)
        _handler.close()

    _handler = logging.FileHandler(log_path, encoding="utf-8")
    _handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(_handler)
    set_log_level(level)
    return log_path


def set_log_level(level: str) -> None:
    """Set the level of the ``gistdrop`` logger.

    Only the names in :data:`LOG_LEVELS` are accepted (case-insensitive);
    anything else falls back to ``INFO``.
    """
    logging.getLogger("gistdrop").setLevel(LOG_LEVELS.get(level.upper(), logging.INFO))


def reset_logging() -> None:
    """Detach the file handler installed by :func:`configure_logging`."""
    global _handler
    if _handler is not None:
        logging.getLogger("gistdrop").removeHandler(_handler)
        _handler.close()
        _handler = None


def write_crash_log(log_dir: Optional[Path] = None) -> str:
    """Write the current exception's traceback to disk and return the file path.

    Must be called from inside an ``except`` block.
    """
    if log_dir is None:
        from gistdrop.config import get_log_dir

        log_dir = get_log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = log_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc(), encoding="utf-8")
    return str(log_path)
