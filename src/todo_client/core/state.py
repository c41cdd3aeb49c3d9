# src/todo_client/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..api.client import ApiClient
from ..auth.service import AuthService
from ..routing.guard import RouteGuard
from ..session.session_store import SessionStore
from ..todos.controller import TodoController


@dataclass
class AppState:
    # Settings are kept on the state so commands can read them without a global lookup.
    settings: object

    session: SessionStore
    api: ApiClient
    auth: AuthService
    todos: TodoController
    guard: RouteGuard
