# src/todo_client/routing/guard.py

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from ..session.session_store import SessionStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

LOGIN_PATH = "/login"


@dataclass(frozen=True, slots=True)
class Redirect:
    to: str


@dataclass(frozen=True, slots=True)
class GuardDecision:
    allowed: bool
    redirect: Redirect | None = None


@dataclass(frozen=True, slots=True)
class Rendered(Generic[T]):
    content: T


class RouteGuard:
    """
    Gate for protected views.

    No token -> Redirect(login_path) and the protected content is never produced.
    Token    -> the children callable is invoked and its result rendered.

    The guard subscribes to the SessionStore and re-evaluates on every change;
    `on_change` listeners get the fresh decision.
    """

    def __init__(self, session: SessionStore, *, login_path: str = LOGIN_PATH) -> None:
        self._session = session
        self._login_path = login_path
        self._listeners: list[Callable[[GuardDecision], None]] = []
        self._decision = self.evaluate()
        self._unsubscribe = session.subscribe(self._on_session_change)

    @property
    def decision(self) -> GuardDecision:
        return self._decision

    def evaluate(self) -> GuardDecision:
        if self._session.get() is None:
            return GuardDecision(allowed=False, redirect=Redirect(self._login_path))
        return GuardDecision(allowed=True)

    def render(self, children: Callable[[], T]) -> Rendered[T] | Redirect:
        decision = self.evaluate()
        self._decision = decision
        if not decision.allowed:
            return Redirect(self._login_path)
        return Rendered(children())

    def on_change(self, listener: Callable[[GuardDecision], None]) -> None:
        self._listeners.append(listener)

    def close(self) -> None:
        self._unsubscribe()
        self._listeners.clear()

    def _on_session_change(self, _token: str | None) -> None:
        self._decision = self.evaluate()
        logger.debug("Route guard re-evaluated allowed=%s", self._decision.allowed)
        for listener in list(self._listeners):
            listener(self._decision)
