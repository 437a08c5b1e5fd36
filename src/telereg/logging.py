"""Logging for the registry and its command line.

Everything logs under the ``telereg`` logger. Level names accepted from the
command line, the config file and ``TELEREG_LOG_LEVEL`` all go through
:func:`normalize_level`.
"""

from __future__ import annotations

import logging as py_logging
import sys
from pathlib import Path
from typing import TextIO

LOGGER_NAME = "telereg"
LOG_LEVELS = {
    "DEBUG": py_logging.DEBUG,
    "INFO": py_logging.INFO,
    "WARN": py_logging.WARNING,
    "ERROR": py_logging.ERROR,
}
DEFAULT_LOG_PATH = Path("~/.config/telereg/logs/telereg.log")
_FALLBACK_LOG_PATH = Path(".telereg/logs/telereg.log")
_FORMAT = "%(asctime)s %(levelname)s %(name)s:%(lineno)d %(message)s"


def normalize_level(value: str) -> str | None:
    """Map a user-supplied level name onto a key of ``LOG_LEVELS``, or None."""
    name = value.strip().upper()
    if name == "WARNING":
        name = "WARN"
    return name if name in LOG_LEVELS else None


def default_log_path() -> Path:
    try:
        return DEFAULT_LOG_PATH.expanduser().resolve()
    except RuntimeError:
        # no resolvable home directory
        return (Path.cwd() / _FALLBACK_LOG_PATH).resolve()


def _open_file_handler(log_file: str | Path) -> py_logging.Handler | None:
    path = Path(log_file).expanduser().resolve()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        return py_logging.FileHandler(path, encoding="utf-8")
    except OSError:
        return None


def configure_logging(
    level: str = "INFO",
    stream: TextIO | None = None,
    *,
    log_file: str | Path | None = None,
) -> py_logging.Logger:
    """Reset the ``telereg`` logger to one console handler and an optional DEBUG file."""
    threshold = LOG_LEVELS[normalize_level(level) or "INFO"]
    formatter = py_logging.Formatter(_FORMAT)

    logger = py_logging.getLogger(LOGGER_NAME)
    logger.setLevel(threshold)
    logger.propagate = False
    while logger.handlers:
        old = logger.handlers.pop()
        old.close()

    console = py_logging.StreamHandler(stream or sys.stderr)
    console.setLevel(threshold)
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_file:
        file_handler = _open_file_handler(log_file)
        if file_handler is None:
            logger.warning("Log file unavailable, logging to console only: %s", log_file)
        else:
            file_handler.setLevel(py_logging.DEBUG)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
    return logger
