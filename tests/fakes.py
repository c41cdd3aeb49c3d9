# tests/fakes.py

from __future__ import annotations

import json
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

import httpx

_TODO_PATH = re.compile(r"^/todos/(?P<id>-?\d+)$")


def _json(status: int, payload: object) -> httpx.Response:
    return httpx.Response(status, json=payload)


@dataclass
class FakeTodoServer:
    """
    In-memory stand-in for the remote todo service, served through httpx.MockTransport.

    - Captures every request for assertions
    - Speaks the same REST contract (register/login/todos CRUD, bearer auth)
    - `before_response` lets a test hold individual responses to force an ordering
    """

    users: dict[str, tuple[int, str]] = field(default_factory=dict)
    tokens: dict[str, str] = field(default_factory=dict)
    todos: dict[int, dict] = field(default_factory=dict)
    requests: list[httpx.Request] = field(default_factory=list)
    fail_login: bool = False
    before_response: Callable[[httpx.Request], Awaitable[None]] | None = None
    _next_user_id: int = 1
    _next_todo_id: int = 1

    # ---- test helpers ----

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def add_user(self, username: str, password: str) -> int:
        uid = self._next_user_id
        self._next_user_id += 1
        self.users[username] = (uid, password)
        return uid

    def issue_token(self, username: str) -> str:
        token = f"tok-{username}-{len(self.tokens) + 1}"
        self.tokens[token] = username
        return token

    def seed(self, username: str, *titles: str, completed: bool = False) -> list[int]:
        uid = self.users[username][0]
        ids = []
        for title in titles:
            tid = self._next_todo_id
            self._next_todo_id += 1
            self.todos[tid] = {"id": tid, "title": title, "completed": completed, "user_id": uid}
            ids.append(tid)
        return ids

    def requests_to(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    # ---- transport handler ----

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.before_response is not None:
            await self.before_response(request)

        path = request.url.path
        method = request.method

        if path == "/register" and method == "POST":
            return self._register(request)
        if path == "/login" and method == "POST":
            return self._login(request)

        owner = self._owner(request)
        if owner is None:
            return httpx.Response(401, text="Missing or invalid token")

        if path == "/todos" and method == "GET":
            return self._list(request, owner)
        if path == "/todos" and method == "POST":
            return self._create(request, owner)

        m = _TODO_PATH.match(path)
        if m:
            tid = int(m.group("id"))
            if method == "PUT":
                return self._update(request, tid)
            if method == "DELETE":
                return self._delete(tid)

        return httpx.Response(404, text="Not found")

    def _owner(self, request: httpx.Request) -> int | None:
        auth = request.headers.get("Authorization", "")
        if not auth.startswith("Bearer "):
            return None
        username = self.tokens.get(auth[len("Bearer ") :])
        if username is None:
            return None
        return self.users[username][0]

    def _register(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        username = body["username"]
        if username in self.users:
            return httpx.Response(409, text="Username taken")
        uid = self.add_user(username, body["password"])
        return _json(200, {"id": uid, "username": username})

    def _login(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        known = self.users.get(body["username"])
        if self.fail_login or known is None or known[1] != body["password"]:
            return httpx.Response(401, text="Invalid credentials")
        return _json(200, {"token": self.issue_token(body["username"])})

    def _list(self, request: httpx.Request, owner: int) -> httpx.Response:
        items = [t for t in self.todos.values() if t["user_id"] == owner]
        completed = request.url.params.get("completed")
        if completed is not None:
            want = completed == "true"
            items = [t for t in items if t["completed"] is want]
        search = request.url.params.get("search")
        if search:
            items = [t for t in items if search.lower() in t["title"].lower()]
        return _json(200, items)

    def _create(self, request: httpx.Request, owner: int) -> httpx.Response:
        body = json.loads(request.content)
        tid = self._next_todo_id
        self._next_todo_id += 1
        todo = {"id": tid, "title": body["title"], "completed": bool(body["completed"]), "user_id": owner}
        self.todos[tid] = todo
        return _json(200, todo)

    def _update(self, request: httpx.Request, tid: int) -> httpx.Response:
        if tid not in self.todos:
            return httpx.Response(404, text=f"Todo with id {tid} not found")
        body = json.loads(request.content)
        self.todos[tid].update(title=body["title"], completed=body["completed"])
        return _json(200, self.todos[tid])

    def _delete(self, tid: int) -> httpx.Response:
        if self.todos.pop(tid, None) is None:
            return httpx.Response(404, text=f"Todo with ID {tid} not found")
        return httpx.Response(204)
