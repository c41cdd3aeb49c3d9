# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest

from todo_client.config import Settings


def test_settings_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TODO_API_BASE_URL", " http://api.example:8080 ")
    monkeypatch.setenv("TODO_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("TODO_MIN_PASSWORD_LENGTH", "not-a-number")
    monkeypatch.setenv("TODO_DISCARD_STALE_FETCHES", "yes")
    monkeypatch.delenv("TODO_SESSION_DB_PATH", raising=False)

    s = Settings.from_env()

    assert s.api_base_url == "http://api.example:8080"
    assert s.session_db_path == tmp_path / "session.sqlite3"
    assert s.min_password_length == 6
    assert s.discard_stale_fetches is True
