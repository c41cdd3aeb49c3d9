# src/todo_client/api/endpoints.py

"""
Endpoint schema of the remote todo service.

Each Endpoint declares where its fields go (path / query / body), whether it needs a
bearer token, and the pydantic model its success body must decode into. The request
builder in ApiClient only ever reads these declarations.
"""

from __future__ import annotations

import string
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from ..core.models import Todo, User


# ---- wire models (request bodies) ----


class Credentials(BaseModel):
    username: str
    password: str


class TodoWrite(BaseModel):
    title: str
    completed: bool = False


class TodoListQuery(BaseModel):
    """Query string for GET /todos. Unset fields are never sent."""

    completed: bool | None = None
    search: str | None = None

    def to_params(self) -> dict[str, str]:
        params: dict[str, str] = {}
        for name, value in self.model_dump(exclude_none=True).items():
            if isinstance(value, bool):
                params[name] = "true" if value else "false"
            else:
                params[name] = str(value)
        return params


# ---- wire models (responses) ----


class _Response(BaseModel):
    model_config = ConfigDict(extra="ignore")


class RegisteredUser(_Response):
    # Server ids start at 1; anything else is not an authoritative id.
    id: int = Field(gt=0)
    username: str

    def to_user(self) -> User:
        return User(id=self.id, username=self.username)


class LoginToken(_Response):
    token: str

    @field_validator("token")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        # Opaque credential: checked, never rewritten.
        if not v.strip():
            raise ValueError("token is blank")
        return v


class TodoRecord(_Response):
    id: int
    title: str
    completed: bool
    user_id: int

    def to_todo(self) -> Todo:
        return Todo(id=self.id, title=self.title, completed=self.completed, owner_id=self.user_id)


TodoRecordList = TypeAdapter(list[TodoRecord])


# ---- endpoint declarations ----


@dataclass(frozen=True, slots=True)
class Endpoint:
    name: str
    method: str
    path: str
    auth_required: bool
    body_model: type[BaseModel] | None = None
    query_model: type[BaseModel] | None = None
    # None means "expect an empty body".
    response: type[BaseModel] | TypeAdapter[Any] | None = None

    @property
    def operation(self) -> str:
        return f"{self.method} {self.path}"

    @property
    def path_fields(self) -> tuple[str, ...]:
        return tuple(
            field for _, field, _, _ in string.Formatter().parse(self.path) if field
        )

    def render_path(self, path_params: dict[str, Any] | None) -> str:
        params = dict(path_params or {})
        missing = [f for f in self.path_fields if f not in params]
        if missing:
            raise ValueError(f"{self.operation}: missing path params {missing}")
        extra = set(params) - set(self.path_fields)
        if extra:
            raise ValueError(f"{self.operation}: unexpected path params {sorted(extra)}")
        return self.path.format(**params)


REGISTER = Endpoint(
    name="register",
    method="POST",
    path="/register",
    auth_required=False,
    body_model=Credentials,
    response=RegisteredUser,
)

LOGIN = Endpoint(
    name="login",
    method="POST",
    path="/login",
    auth_required=False,
    body_model=Credentials,
    response=LoginToken,
)

LIST_TODOS = Endpoint(
    name="list_todos",
    method="GET",
    path="/todos",
    auth_required=True,
    query_model=TodoListQuery,
    response=TodoRecordList,
)

CREATE_TODO = Endpoint(
    name="create_todo",
    method="POST",
    path="/todos",
    auth_required=True,
    body_model=TodoWrite,
    response=TodoRecord,
)

UPDATE_TODO = Endpoint(
    name="update_todo",
    method="PUT",
    path="/todos/{id}",
    auth_required=True,
    body_model=TodoWrite,
    response=TodoRecord,
)

DELETE_TODO = Endpoint(
    name="delete_todo",
    method="DELETE",
    path="/todos/{id}",
    auth_required=True,
    response=None,
)
