# src/todo_client/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState
from ..routing.guard import GuardDecision

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


def _greeting(state: AppState) -> str:
    user = state.auth.user
    if state.auth.is_authenticated:
        who = user.username if user else "previous session"
        return f"Welcome back ({who}). Use /list to see your todos, /help for commands, /exit to quit."
    return "Not logged in. Use /login or /signup. Use /help for commands, /exit to quit."


async def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started (authenticated=%s).", state.auth.is_authenticated)
    _print_ts(_greeting(state))

    def on_view_change(decision: GuardDecision) -> None:
        if not decision.allowed and decision.redirect is not None:
            _print_ts(f"Session ended. Log in again with {decision.redirect.to}.")

    state.guard.on_change(on_view_change)

    while True:
        try:
            user_input = (await asyncio.to_thread(input, ">>> ")).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        if not user_input.startswith("/"):
            # Bare text is a shortcut for /add when logged in.
            user_input = f"/add {user_input}"

        try:
            response = await command_registry.handle(state, user_input, emit=_print_ts)
        except Exception:
            logger.exception("Command handler crashed.")
            response = "Internal error while handling a command."

        if response is not None:
            _print_ts(response)

    logger.info("Console connector finished.")
