# src/todo_client/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

LOG_FILE_NAME = "todo.log"
_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class _ConsoleNoiseFilter(logging.Filter):
    """Console shows our own records; per-request API chatter and third parties only when serious."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith("todo_client.api."):
            return record.levelno >= logging.WARNING
        if record.name.startswith("todo_client."):
            return True
        return record.levelno >= logging.ERROR


def setup_logging(settings: Any) -> Path:
    """
    Console (settings.log_level, filtered) plus a DEBUG file under settings.data_dir.

    Call once, before the first log record. Returns the log file path.
    """
    level = getattr(logging, str(getattr(settings, "log_level", "INFO")).upper(), logging.INFO)
    log_file = Path(getattr(settings, "data_dir", ".local/todo")) / LOG_FILE_NAME
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    # httpx logs every request line at INFO; ApiClient already logs each call.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    return log_file
