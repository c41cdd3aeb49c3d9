# src/todo_client/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires SessionStore -> ApiClient -> AuthService / TodoController / RouteGuard,
- restores a persisted session.
"""

from __future__ import annotations

import logging

import httpx

from ..api.client import ApiClient
from ..auth.service import AuthService
from ..config import get_settings
from ..core.state import AppState
from ..routing.guard import RouteGuard
from ..session.session_store import SessionStore
from ..todos.controller import TodoController

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.session_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(
    *,
    settings=None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and the HTTP transport) injectable makes the app easy to test.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    session = SessionStore(settings.session_db_path)
    api = ApiClient.from_settings(session, settings, transport=transport)
    auth = AuthService.from_settings(api, session, settings)
    todos = TodoController.from_settings(api, settings)
    guard = RouteGuard(session)

    def _drop_mirror_on_logout(decision) -> None:
        # Anything left over from the previous user must not leak into the next session.
        if not decision.allowed:
            todos.reset()

    guard.on_change(_drop_mirror_on_logout)

    auth.restore()

    return AppState(
        settings=settings,
        session=session,
        api=api,
        auth=auth,
        todos=todos,
        guard=guard,
    )


async def shutdown_state(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        state.guard.close()
    except Exception:
        logger.debug("Route guard close failed.", exc_info=True)
    try:
        await state.api.aclose()
    except Exception:
        logger.debug("HTTP client close failed.", exc_info=True)
