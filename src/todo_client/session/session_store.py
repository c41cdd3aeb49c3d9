# src/todo_client/session/session_store.py

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
import time
from collections.abc import Callable
from pathlib import Path

from ..core.models import User

logger = logging.getLogger(__name__)

SessionListener = Callable[[str | None], None]

_KEY_TOKEN = "token"
_KEY_USER = "user"


class SessionStore:
    """
    Owner of the current bearer token, with a durable SQLite mirror.

    - get() hydrates lazily from disk, at most once until clear().
    - set() commits to disk first, then updates memory, so a failed write never leaves
      memory and disk disagreeing.
    - clear() drops token and user together.
    - set() lets sqlite3.Error propagate; get() treats an unreadable store as "no token".

    Each method opens its own SQLite connection (same approach as the other stores).
    The token is opaque: no structure or expiry checks.
    """

    def __init__(self, db_path: str | Path = "session.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._token: str | None = None
        self._hydrated = False
        self._listeners: list[SessionListener] = []
        self._ensure_schema()
        self._drop_invalid_persisted_token()
        logger.info("SessionStore ready db=%s", self._db_path)

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        with contextlib.suppress(Exception):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS session_kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    def _read(self, key: str) -> str | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT value FROM session_kv WHERE key = ?", (key,)).fetchone()
            return str(row["value"]) if row else None
        finally:
            conn.close()

    def _write(self, items: dict[str, str]) -> None:
        """Upsert all items in one transaction."""
        now = time.time()
        conn = self._get_conn()
        try:
            conn.executemany(
                """
                INSERT INTO session_kv(key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                """,
                [(k, v, now) for k, v in items.items()],
            )
            conn.commit()
        finally:
            conn.close()

    def _delete(self, *keys: str) -> None:
        if not keys:
            return
        placeholders = ",".join("?" for _ in keys)
        conn = self._get_conn()
        try:
            conn.execute(f"DELETE FROM session_kv WHERE key IN ({placeholders})", keys)
            conn.commit()
        finally:
            conn.close()

    def _drop_invalid_persisted_token(self) -> None:
        """Startup cleanup: a blank persisted token means "no session", remove both keys."""
        raw = self._read(_KEY_TOKEN)
        if raw is not None and not raw.strip():
            logger.info("SessionStore: discarding blank persisted token")
            self._delete(_KEY_TOKEN, _KEY_USER)

    def _notify(self, token: str | None) -> None:
        for listener in list(self._listeners):
            try:
                listener(token)
            except Exception:
                logger.exception("Session listener failed")

    # ---- public API ----

    def get(self) -> str | None:
        if self._token is not None:
            return self._token
        if self._hydrated:
            return None

        try:
            raw = self._read(_KEY_TOKEN)
        except sqlite3.Error as e:
            # Unreadable store reads as "no session"; the next get() tries again.
            logger.warning("SessionStore: could not read persisted token: %s", e)
            return None
        self._hydrated = True
        if raw and raw.strip():
            self._token = raw
            logger.debug("SessionStore: token hydrated from disk")
        return self._token

    def set(self, token: str, *, user: User | None = None) -> None:
        """Store the token (and optionally the user projection) in a single commit."""
        if not isinstance(token, str) or not token.strip():
            raise ValueError("token must be a non-empty string")

        items = {_KEY_TOKEN: token}
        if user is not None:
            items[_KEY_USER] = json.dumps(user.to_dict(), ensure_ascii=False)
        self._write(items)
        self._token = token
        self._hydrated = True
        logger.debug("SessionStore: token set")
        self._notify(token)

    def clear(self) -> None:
        self._delete(_KEY_TOKEN, _KEY_USER)
        self._token = None
        self._hydrated = False
        logger.debug("SessionStore: cleared")
        self._notify(None)

    @property
    def is_authenticated(self) -> bool:
        return self.get() is not None

    def save_user(self, user: User) -> None:
        self._write({_KEY_USER: json.dumps(user.to_dict(), ensure_ascii=False)})

    def load_user(self) -> User | None:
        raw = self._read(_KEY_USER)
        if not raw:
            return None
        try:
            return User.from_dict(json.loads(raw))
        except json.JSONDecodeError:
            logger.warning("SessionStore: persisted user is not valid JSON; ignoring")
            return None

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a change listener; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            with contextlib.suppress(ValueError):
                self._listeners.remove(listener)

        return _unsubscribe
