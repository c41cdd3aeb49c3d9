# src/todo_client/cli/commands.py

from __future__ import annotations

import contextlib
import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import replace
from typing import cast

from ..core.errors import Outcome
from ..core.models import QueryFilter, Todo
from ..core.state import AppState
from ..routing.guard import Redirect

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], Awaitable[str]]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], Awaitable[str]]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

_FILTER_WORDS: dict[str, bool | None] = {
    "all": None,
    "done": True,
    "completed": True,
    "open": False,
    "todo": False,
    "incomplete": False,
}


class CommandRegistry:
    """Slash-command registry used by the console (/help, /login, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}
        self._protected: set[str] = set()

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
        *,
        protected: bool = False,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler
        if protected:
            self._protected.update([key, *(a.lower() for a in aliases)])

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 3

        def run() -> Awaitable[str]:
            if nparams >= 3:
                return cast(CommandHandler3, handler)(state, args, emit)
            return cast(CommandHandler2, handler)(state, args)

        if name not in self._protected:
            return await run()

        view = state.guard.render(run)
        if isinstance(view, Redirect):
            return f"You are not logged in. Use {view.to} <username> <password> (or /signup)."
        return await view.content

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- formatting ----


def format_todo(todo: Todo) -> str:
    mark = "x" if todo.completed else " "
    return f"[{mark}] #{todo.id} {todo.title}"


def format_todos(todos: list[Todo], flt: QueryFilter) -> str:
    if not todos:
        return f"No todos found ({flt.describe()}). Add one with /add <title>."
    lines = [f"Todos ({flt.describe()}):"]
    lines.extend(f"  {format_todo(t)}" for t in todos)
    return "\n".join(lines)


def _message(outcome: Outcome, fallback: str) -> str:
    return outcome.message or fallback


def _parse_id(raw: str) -> int | None:
    try:
        return int(raw.lstrip("#"))
    except ValueError:
        return None


# ---- auth commands ----


async def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


async def cmd_status(state: AppState, args: list[str]) -> str:
    user = state.auth.user
    who = user.username if user else "-"
    return (
        "Status:\n"
        f"  Server: {state.api.base_url}\n"
        f"  Session: {state.auth.state.value} (user: {who})\n"
        f"  Filter: {state.todos.filter.describe()}\n"
        f"  Cached todos: {len(state.todos.todos)}"
    )


async def cmd_login(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """/login <username> <password>"""
    if len(args) != 2:
        return "Usage: /login <username> <password>"
    if emit:
        with contextlib.suppress(Exception):
            emit("Logging in...")
    outcome = await state.auth.login(args[0], args[1])
    if not outcome.ok:
        return _message(outcome, "Login failed")
    await state.todos.fetch(QueryFilter())
    return f"Logged in as {args[0]}."


async def cmd_signup(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """/signup <username> <password> <confirm_password>"""
    if len(args) != 3:
        return "Usage: /signup <username> <password> <confirm_password>"
    if emit:
        with contextlib.suppress(Exception):
            emit("Creating account...")
    outcome = await state.auth.signup(args[0], args[1], args[2])
    if not outcome.ok:
        return _message(outcome, "Signup failed")
    await state.todos.fetch(QueryFilter())
    return f"Account created. Logged in as {args[0]}."


async def cmd_logout(state: AppState, args: list[str]) -> str:
    state.auth.logout()
    return "Logged out."


async def cmd_whoami(state: AppState, args: list[str]) -> str:
    user = state.auth.user
    if user is None:
        return "Logged in (user unknown)." if state.auth.is_authenticated else "Not logged in."
    if user.is_placeholder:
        return f"{user.username} (id unknown: logged in without signup)"
    return f"{user.username} (id {user.id})"


# ---- todo commands (protected) ----


async def cmd_list(state: AppState, args: list[str]) -> str:
    """
    /list                -> refetch with the current filter
    /list done|open|all  -> change the completion filter
    /list open milk      -> completion filter + search text
    """
    flt = state.todos.filter
    rest = list(args)
    if rest and rest[0].lower() in _FILTER_WORDS:
        flt = replace(flt, completed=_FILTER_WORDS[rest.pop(0).lower()])
    if rest:
        flt = replace(flt, search=" ".join(rest))

    outcome = await state.todos.fetch(flt)
    if not outcome.ok:
        return _message(outcome, "Failed to fetch todos")
    return format_todos(state.todos.todos, state.todos.filter)


async def cmd_filter(state: AppState, args: list[str]) -> str:
    if len(args) != 1 or args[0].lower() not in _FILTER_WORDS:
        return "Usage: /filter all|done|open"
    flt = replace(state.todos.filter, completed=_FILTER_WORDS[args[0].lower()])
    outcome = await state.todos.fetch(flt)
    if not outcome.ok:
        return _message(outcome, "Failed to fetch todos")
    return format_todos(state.todos.todos, state.todos.filter)


async def cmd_search(state: AppState, args: list[str]) -> str:
    """/search <text>; without text the search is cleared."""
    flt = replace(state.todos.filter, search=" ".join(args))
    outcome = await state.todos.fetch(flt)
    if not outcome.ok:
        return _message(outcome, "Failed to fetch todos")
    return format_todos(state.todos.todos, state.todos.filter)


async def cmd_add(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /add <title>"
    outcome = await state.todos.create(" ".join(args))
    if not outcome.ok or outcome.value is None:
        return _message(outcome, "Failed to add todo")
    return f"Added {format_todo(outcome.value)}"


async def _set_completed(state: AppState, args: list[str], completed: bool) -> str:
    todo_id = _parse_id(args[0]) if len(args) == 1 else None
    if todo_id is None:
        return f"Usage: /{'done' if completed else 'undo'} <id>"
    outcome = await state.todos.set_completed(todo_id, completed)
    if not outcome.ok or outcome.value is None:
        return _message(outcome, "Failed to update todo")
    return f"Updated {format_todo(outcome.value)}"


async def cmd_done(state: AppState, args: list[str]) -> str:
    return await _set_completed(state, args, True)


async def cmd_undo(state: AppState, args: list[str]) -> str:
    return await _set_completed(state, args, False)


async def cmd_edit(state: AppState, args: list[str]) -> str:
    todo_id = _parse_id(args[0]) if len(args) >= 2 else None
    if todo_id is None:
        return "Usage: /edit <id> <new title>"
    outcome = await state.todos.rename(todo_id, " ".join(args[1:]))
    if not outcome.ok or outcome.value is None:
        return _message(outcome, "Failed to update todo")
    return f"Updated {format_todo(outcome.value)}"


async def cmd_rm(state: AppState, args: list[str]) -> str:
    todo_id = _parse_id(args[0]) if len(args) == 1 else None
    if todo_id is None:
        return "Usage: /rm <id>"
    outcome = await state.todos.delete(todo_id)
    if not outcome.ok:
        return _message(outcome, "Failed to delete todo")
    return f"Deleted #{todo_id}."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show server, session and filter.")
registry.register("signup", cmd_signup, help_text="Create an account: /signup <user> <pass> <pass>.")
registry.register("login", cmd_login, help_text="Log in: /login <user> <pass>.")
registry.register("logout", cmd_logout, help_text="Forget the local session.")
registry.register("whoami", cmd_whoami, help_text="Show the current user.")
registry.register(
    "list", cmd_list, help_text="List todos: /list [all|done|open] [search].", aliases=["ls"], protected=True
)
registry.register("filter", cmd_filter, help_text="Set completion filter: /filter all|done|open.", protected=True)
registry.register("search", cmd_search, help_text="Search titles: /search <text> (empty clears).", protected=True)
registry.register("add", cmd_add, help_text="Add a todo: /add <title>.", protected=True)
registry.register("done", cmd_done, help_text="Mark completed: /done <id>.", protected=True)
registry.register("undo", cmd_undo, help_text="Mark not completed: /undo <id>.", protected=True)
registry.register("edit", cmd_edit, help_text="Rename: /edit <id> <title>.", protected=True)
registry.register("rm", cmd_rm, help_text="Delete: /rm <id>.", aliases=["del"], protected=True)
