# tests/test_logging_setup.py

from __future__ import annotations

import logging
from pathlib import Path
from types import SimpleNamespace

import pytest

from todo_client.logging_setup import LOG_FILE_NAME, _ConsoleNoiseFilter, setup_logging


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


@pytest.mark.parametrize(
    ("name", "level", "shown"),
    [
        ("todo_client.auth.service", logging.INFO, True),
        ("todo_client.api.client", logging.INFO, False),
        ("todo_client.api.client", logging.WARNING, True),
        ("httpx", logging.WARNING, False),
        ("httpx", logging.ERROR, True),
    ],
)
def test_console_filter(name: str, level: int, shown: bool) -> None:
    assert _ConsoleNoiseFilter().filter(_record(name, level)) is shown


def test_setup_writes_debug_to_file_under_data_dir(tmp_path: Path) -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        log_file = setup_logging(SimpleNamespace(log_level="warning", data_dir=tmp_path / "data"))
        logging.getLogger("todo_client.todos.controller").debug("fetched 3 todos")

        assert log_file == tmp_path / "data" / LOG_FILE_NAME
        assert "fetched 3 todos" in log_file.read_text(encoding="utf-8")
        [console] = [h for h in root.handlers if not isinstance(h, logging.FileHandler)]
        assert console.level == logging.WARNING
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
            if h not in saved_handlers:
                h.close()
        for h in saved_handlers:
            root.addHandler(h)
        root.setLevel(saved_level)
