# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real credentials. The session token lives in the local SQLite file, never in .env.

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TODO_APP_NAME": "App display name (default: todo).",
    "TODO_LOG_LEVEL": "Console logging level (default: INFO). The file log is always DEBUG.",
    # Remote service
    "TODO_API_BASE_URL": "Base URL of the todo REST service (default: http://localhost:3001).",
    "TODO_HTTP_TIMEOUT_SECONDS": "Transport timeout for each request (default: 10).",
    # Paths (gitignored)
    "TODO_DATA_DIR": "Local data directory for logs and session (default: .local/todo).",
    "TODO_SESSION_DB_PATH": "Session SQLite path (default: <data_dir>/session.sqlite3).",
    # Behaviour
    "TODO_MIN_PASSWORD_LENGTH": "Minimum password length checked before /register (default: 6).",
    "TODO_DISCARD_STALE_FETCHES": (
        "Drop list responses older than the newest issued fetch (default: false, "
        "last response to arrive wins)."
    ),
}
