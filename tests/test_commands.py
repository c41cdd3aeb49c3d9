# tests/test_commands.py

from __future__ import annotations

import pytest

from todo_client.cli.commands import CommandRegistry, registry

from .fakes import FakeTodoServer


@pytest.mark.asyncio
async def test_command_registry_routes_2_and_3_params(state) -> None:
    reg = CommandRegistry()
    called = {"h2": 0, "h3": 0}

    async def h2(state, args):
        called["h2"] += 1
        return "h2"

    async def h3(state, args, emit):
        called["h3"] += 1
        if emit is not None:
            emit("note")
        return "h3"

    reg.register("a", h2, "a")
    reg.register("b", h3, "b")

    assert await reg.handle(state, "/a x") == "h2"
    assert await reg.handle(state, "/b y", emit=lambda _: None) == "h3"
    assert called == {"h2": 1, "h3": 1}


@pytest.mark.asyncio
async def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert await reg.handle(state, "hello") is None
    assert "Unknown command" in (await reg.handle(state, "/nope") or "")


@pytest.mark.asyncio
async def test_protected_command_redirects_when_logged_out(state, server: FakeTodoServer) -> None:
    reply = await registry.handle(state, "/list")

    assert reply is not None and "/login" in reply
    assert server.requests == []


@pytest.mark.asyncio
async def test_console_flow(state, server: FakeTodoServer) -> None:
    assert "Account created" in (await registry.handle(state, "/signup alice secret1 secret1") or "")

    added = await registry.handle(state, "/add buy milk")
    assert added is not None and "buy milk" in added
    await registry.handle(state, "/add walk dog")

    [milk_id] = [t.id for t in state.todos.todos if t.title == "buy milk"]
    assert "[x]" in (await registry.handle(state, f"/done {milk_id}") or "")

    listed = await registry.handle(state, "/list done")
    assert listed is not None
    assert "buy milk" in listed and "walk dog" not in listed

    searched = await registry.handle(state, "/list all walk")
    assert searched is not None
    assert "walk dog" in searched and "buy milk" not in searched

    assert await registry.handle(state, f"/rm {milk_id}") == f"Deleted #{milk_id}."

    assert await registry.handle(state, "/logout") == "Logged out."
    # The guard listener drops the mirror once the session is gone.
    assert state.todos.todos == []
    assert "/login" in (await registry.handle(state, "/list") or "")


@pytest.mark.asyncio
async def test_login_failure_message(state, server: FakeTodoServer) -> None:
    server.add_user("alice", "secret1")

    assert await registry.handle(state, "/login alice wrong") == "Login failed"
    assert state.session.get() is None
