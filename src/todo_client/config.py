# src/todo_client/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time.
- Every component also accepts an injected Settings (tests build their own).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "TODO"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Remote service ----
    api_base_url: str
    http_timeout_seconds: float

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    session_db_path: Path

    # ---- Behaviour ----
    min_password_length: int
    discard_stale_fetches: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "todo") or "todo"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        api_base_url = (_env(_k("API_BASE_URL"), "http://localhost:3001") or "").strip()
        http_timeout_seconds = _env_float(_k("HTTP_TIMEOUT_SECONDS"), 10.0)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/todo"))
        session_db_path = _env_path(_k("SESSION_DB_PATH"), data_dir / "session.sqlite3")

        min_password_length = max(1, _env_int(_k("MIN_PASSWORD_LENGTH"), 6))
        discard_stale_fetches = _env_bool(_k("DISCARD_STALE_FETCHES"), False)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            api_base_url=api_base_url,
            http_timeout_seconds=http_timeout_seconds,
            data_dir=data_dir,
            session_db_path=session_db_path,
            min_password_length=min_password_length,
            discard_stale_fetches=discard_stale_fetches,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
