# tests/test_api_client.py

from __future__ import annotations

import json

import httpx
import pytest

from todo_client.api import endpoints as ep
from todo_client.api.client import ApiClient
from todo_client.core.errors import DecodeError, Err, Ok, StatusError, TransportError
from todo_client.core.models import QueryFilter, Todo
from todo_client.session.session_store import SessionStore


@pytest.mark.asyncio
async def test_auth_header_only_when_token_present(api: ApiClient, session: SessionStore, server) -> None:
    server.add_user("alice", "secret1")
    await api.login("alice", "secret1")
    assert "Authorization" not in server.requests[-1].headers

    session.set("tok-x")
    await api.list_todos()
    assert server.requests[-1].headers["Authorization"] == "Bearer tok-x"


@pytest.mark.asyncio
async def test_unset_filter_sends_no_query_params(api: ApiClient, server, logged_in) -> None:
    await api.list_todos(QueryFilter(completed=None, search=""))
    assert server.requests[-1].url.query == b""

    await api.list_todos(QueryFilter(completed=None, search="   "))
    assert server.requests[-1].url.query == b""


@pytest.mark.asyncio
async def test_completed_filter_sends_only_completed(api: ApiClient, server, logged_in) -> None:
    await api.list_todos(QueryFilter(completed=True))
    assert dict(server.requests[-1].url.params) == {"completed": "true"}

    await api.list_todos(QueryFilter(completed=False, search=" milk "))
    assert dict(server.requests[-1].url.params) == {"completed": "false", "search": "milk"}


@pytest.mark.asyncio
async def test_path_params_and_body_serialization(api: ApiClient, server, logged_in) -> None:
    [tid] = server.seed("alice", "old")
    res = await api.update_todo(Todo(id=tid, title="new", completed=True, owner_id=1))

    assert isinstance(res, Ok)
    assert res.value == Todo(id=tid, title="new", completed=True, owner_id=1)
    sent = server.requests[-1]
    assert sent.method == "PUT"
    assert sent.url.path == f"/todos/{tid}"
    assert json.loads(sent.content) == {"title": "new", "completed": True}


@pytest.mark.asyncio
async def test_status_failure_carries_operation_and_leaves_session(
    api: ApiClient, session: SessionStore, server
) -> None:
    session.set("stale-token")
    res = await api.list_todos()

    assert isinstance(res, Err)
    assert isinstance(res.error, StatusError)
    assert res.error.status_code == 401
    assert res.error.operation == "GET /todos"
    assert session.get() == "stale-token"


@pytest.mark.asyncio
async def test_transport_failure(session: SessionStore) -> None:
    def boom(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    api = ApiClient(session, base_url="http://todo.test", transport=httpx.MockTransport(boom))
    res = await api.login("alice", "secret1")

    assert isinstance(res, Err)
    assert isinstance(res.error, TransportError)
    assert res.error.operation == "POST /login"
    assert isinstance(res.error.cause, httpx.ConnectError)
    await api.aclose()


@pytest.mark.asyncio
async def test_shape_mismatch_is_a_decode_error(session: SessionStore) -> None:
    def wrong_shape(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[{"id": 1, "name": "no title here"}])

    async with ApiClient(session, base_url="http://todo.test", transport=httpx.MockTransport(wrong_shape)) as api:
        session.set("tok")
        res = await api.list_todos()

    assert isinstance(res, Err)
    assert isinstance(res.error, DecodeError)
    assert res.error.operation == "GET /todos"


@pytest.mark.asyncio
async def test_delete_accepts_empty_body(api: ApiClient, server, logged_in) -> None:
    [tid] = server.seed("alice", "x")
    res = await api.delete_todo(tid)
    assert isinstance(res, Ok)
    assert res.value is None


def test_request_builder_rejects_wrong_slot_types(api: ApiClient) -> None:
    with pytest.raises(TypeError):
        api.build_request(ep.LIST_TODOS, body=ep.TodoWrite(title="x"))
    with pytest.raises(TypeError):
        api.build_request(ep.CREATE_TODO, query=ep.TodoListQuery())
    with pytest.raises(ValueError):
        api.build_request(ep.DELETE_TODO)
