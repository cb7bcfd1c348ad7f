"""Logging setup: a per-process log file plus warnings and errors on stderr."""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Union

LOGGER_NAME = "pbench"

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


class _Formatter(logging.Formatter):
    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        return datetime.fromtimestamp(record.created).strftime("%Y/%m/%d %H:%M:%S.%f")


_FORMAT = "[%(levelname)s] %(asctime)s %(filename)s:%(lineno)d: %(message)s"


def parse_level(value: str) -> int:
    """Map a level name (any case) to a logging level; unknown names give INFO."""
    return _LEVELS.get(value.upper(), logging.INFO)


def setup(directory: Union[str, Path] = "", level: Union[str, int] = "INFO") -> Path:
    """Send the package's log to <program>.<pid>.log in directory.

    Records at or above level go to the file; warnings and errors also go to
    stderr. Returns the path of the log file.
    """
    threshold = parse_level(level) if isinstance(level, str) else level
    program = Path(sys.argv[0]).name if sys.argv and sys.argv[0] else LOGGER_NAME
    path = Path(directory or ".") / f"{program}.{os.getpid()}.log"

    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = _Formatter(_FORMAT)
    file_handler = logging.FileHandler(path, mode="w", encoding="utf-8")
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.WARNING)
    stderr_handler.setFormatter(formatter)
    logger.addHandler(stderr_handler)

    logger.setLevel(threshold)
    logger.propagate = False
    return path