# src/todo_client/core/models.py

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

# /login returns only a token, so a user known through login alone gets this id.
UNKNOWN_USER_ID = -1


@dataclass(frozen=True, slots=True)
class User:
    """
    Client-side identity projection.

    Not authoritative: after a plain login the id is UNKNOWN_USER_ID and must not be
    used for identity comparisons.
    """

    id: int
    username: str

    @property
    def is_placeholder(self) -> bool:
        return self.id == UNKNOWN_USER_ID

    def owns(self, todo: Todo) -> bool:
        # A placeholder id would match nothing real, or worse, a server row with id -1.
        if self.is_placeholder:
            return False
        return todo.owner_id == self.id

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "username": self.username}

    @classmethod
    def from_dict(cls, raw: Any) -> User | None:
        if not isinstance(raw, dict):
            return None
        uid = raw.get("id")
        username = raw.get("username")
        if not isinstance(uid, int) or isinstance(uid, bool):
            return None
        if not isinstance(username, str) or not username:
            return None
        return cls(id=uid, username=username)


@dataclass(frozen=True, slots=True)
class Todo:
    id: int
    title: str
    completed: bool
    owner_id: int

    def with_completed(self, completed: bool) -> Todo:
        return replace(self, completed=completed)

    def with_title(self, title: str) -> Todo:
        return replace(self, title=title)


@dataclass(frozen=True, slots=True)
class QueryFilter:
    """
    Constraints for a list fetch.

    completed=None and a blank search both mean "no constraint".
    """

    completed: bool | None = None
    search: str = ""

    @property
    def search_text(self) -> str | None:
        s = (self.search or "").strip()
        return s or None

    def describe(self) -> str:
        parts: list[str] = []
        if self.completed is True:
            parts.append("done")
        elif self.completed is False:
            parts.append("open")
        else:
            parts.append("all")
        if self.search_text:
            parts.append(f'matching "{self.search_text}"')
        return " ".join(parts)
