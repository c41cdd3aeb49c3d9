# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from todo_client.api.client import ApiClient
from todo_client.auth.service import AuthService
from todo_client.cli.bootstrap import create_initial_state
from todo_client.core.state import AppState
from todo_client.session.session_store import SessionStore
from todo_client.todos.controller import TodoController

from .fakes import FakeTodoServer


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with the bootstrap and services.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="todo-test",
        log_level="DEBUG",
        api_base_url="http://todo.test",
        http_timeout_seconds=5.0,
        data_dir=tmp_path,
        session_db_path=tmp_path / "session.sqlite3",
        min_password_length=6,
        discard_stale_fetches=False,
    )


@pytest.fixture()
def server() -> FakeTodoServer:
    return FakeTodoServer()


@pytest.fixture()
def session(settings: SimpleNamespace) -> SessionStore:
    # Real SQLite: persistence is part of what we want to test.
    return SessionStore(settings.session_db_path)


@pytest.fixture()
def api(session: SessionStore, settings: SimpleNamespace, server: FakeTodoServer) -> ApiClient:
    return ApiClient.from_settings(session, settings, transport=server.transport())


@pytest.fixture()
def auth(api: ApiClient, session: SessionStore) -> AuthService:
    return AuthService(api, session, min_password_length=6)


@pytest.fixture()
def todos(api: ApiClient) -> TodoController:
    return TodoController(api)


@pytest.fixture()
def logged_in(server: FakeTodoServer, session: SessionStore) -> str:
    """Register alice on the fake server and put a valid token into the session."""
    server.add_user("alice", "secret1")
    token = server.issue_token("alice")
    session.set(token)
    return token


@pytest.fixture()
def state(settings: SimpleNamespace, server: FakeTodoServer) -> AppState:
    """AppState wired exactly like the CLI, but against the fake server."""
    return create_initial_state(settings=settings, transport=server.transport())
