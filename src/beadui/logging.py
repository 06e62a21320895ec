"""Structured JSON logging for beadui.

Writes JSONL to ``beadui.log`` next to the config file, with rotation
(5MB, 3 backups). The TUI owns the terminal, so nothing is logged to stderr.
"""

from __future__ import annotations

import logging
import os
import threading
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING, Any

import orjson

if TYPE_CHECKING:
    from pathlib import Path

_LOG_FILENAME = "beadui.log"
_setup_lock = threading.Lock()
_MAX_BYTES = 5 * 1024 * 1024  # 5MB
_BACKUP_COUNT = 3


class _JsonFormatter(logging.Formatter):
    """Format log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = str(record.exc_info[1])
        return orjson.dumps(entry, default=str).decode()


def setup_logging(log_dir: Path, level: int = logging.INFO) -> logging.Logger:
    """Attach a rotating JSONL file handler to the ``beadui`` logger.

    Calling it again with the same directory only updates the level.
    """
    logger = logging.getLogger("beadui")
    log_path = log_dir / _LOG_FILENAME
    target_filename = os.path.abspath(str(log_path))

    with _setup_lock:
        logger.setLevel(level)
        for h in logger.handlers[:]:
            if not isinstance(h, RotatingFileHandler):
                continue
            if h.baseFilename == target_filename:
                return logger
            logger.removeHandler(h)
            h.close()

        log_dir.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            str(log_path),
            maxBytes=_MAX_BYTES,
            backupCount=_BACKUP_COUNT,
        )
        handler.setFormatter(_JsonFormatter())
        logger.addHandler(handler)
    return logger
