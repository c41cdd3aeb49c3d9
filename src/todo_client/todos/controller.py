# src/todo_client/todos/controller.py

from __future__ import annotations

import logging
from typing import Any

from ..api.client import ApiClient
from ..core.errors import Err, Outcome, StatusError, ValidationError
from ..core.models import QueryFilter, Todo

logger = logging.getLogger(__name__)

FETCH_FAILED = "Failed to fetch todos"
ADD_FAILED = "Failed to add todo"
UPDATE_FAILED = "Failed to update todo"
DELETE_FAILED = "Failed to delete todo"
TITLE_REQUIRED = "Title is required"


class TodoController:
    """
    Local mirror of the remote todo collection.

    The mirror only changes on an acknowledged response:
    - fetch replaces it wholesale (server order kept)
    - create appends, update replaces by id, delete removes by id
    Failures leave it exactly as it was.

    Ordering of concurrent fetches:
    - default: whichever response completes last wins
    - discard_stale=True: responses of fetches older than the newest issued one are dropped

    reset() starts a new epoch: any response to a request issued before it is dropped
    in both modes, so a logout never gets refilled by the previous user's data.
    """

    def __init__(self, api: ApiClient, *, discard_stale: bool = False) -> None:
        self._api = api
        self._discard_stale = bool(discard_stale)
        self._todos: list[Todo] = []
        self._filter = QueryFilter()
        self._generation = 0
        self._epoch = 0
        self.last_error: str | None = None

    @classmethod
    def from_settings(cls, api: ApiClient, settings: Any) -> TodoController:
        return cls(api, discard_stale=bool(getattr(settings, "discard_stale_fetches", False)))

    # ---- read side ----

    @property
    def todos(self) -> list[Todo]:
        return list(self._todos)

    @property
    def filter(self) -> QueryFilter:
        return self._filter

    def get(self, todo_id: int) -> Todo | None:
        for t in self._todos:
            if t.id == todo_id:
                return t
        return None

    def reset(self) -> None:
        """Drop the mirror (e.g. after logout)."""
        self._todos = []
        self._filter = QueryFilter()
        self._generation += 1
        self._epoch += 1
        self.last_error = None

    # ---- operations ----

    def _failed(self, outcome: Outcome[Any]) -> Outcome[Any]:
        self.last_error = outcome.message
        return outcome

    def _outdated(self, epoch: int, what: str) -> bool:
        if epoch == self._epoch:
            return False
        logger.debug("Dropping %s response issued before reset", what)
        return True

    async def fetch(self, flt: QueryFilter | None = None) -> Outcome[list[Todo]]:
        flt = flt if flt is not None else self._filter
        self._generation += 1
        generation = self._generation
        epoch = self._epoch
        self.last_error = None

        res = await self._api.list_todos(flt)
        if isinstance(res, Err):
            logger.info("Fetch failed filter=%s kind=%s", flt.describe(), res.error.kind)
            outcome = Outcome.failure(res.error, FETCH_FAILED)
            return outcome if self._outdated(epoch, "fetch") else self._failed(outcome)

        if self._outdated(epoch, "fetch"):
            return Outcome.success(list(res.value))

        if self._discard_stale and generation != self._generation:
            logger.debug("Dropping stale fetch generation=%s latest=%s", generation, self._generation)
            return Outcome.success(list(res.value))

        self._todos = list(res.value)
        self._filter = flt
        logger.debug("Fetched %d todos filter=%s", len(self._todos), flt.describe())
        return Outcome.success(list(self._todos))

    async def create(self, title: str) -> Outcome[Todo]:
        self.last_error = None
        if not (title or "").strip():
            return self._failed(Outcome.failure(ValidationError(message=TITLE_REQUIRED, field="title")))

        epoch = self._epoch
        res = await self._api.create_todo(title)
        if isinstance(res, Err):
            logger.info("Create failed kind=%s", res.error.kind)
            outcome = Outcome.failure(res.error, ADD_FAILED)
            return outcome if self._outdated(epoch, "create") else self._failed(outcome)

        if self._outdated(epoch, "create"):
            return Outcome.success(res.value)

        todo = res.value
        self._todos = [*self._todos, todo]
        logger.debug("Created todo id=%s", todo.id)
        return Outcome.success(todo)

    async def update(self, todo: Todo) -> Outcome[Todo]:
        self.last_error = None
        if not (todo.title or "").strip():
            return self._failed(Outcome.failure(ValidationError(message=TITLE_REQUIRED, field="title")))

        res = await self._api.update_todo(todo)
        if isinstance(res, Err):
            logger.info("Update failed id=%s kind=%s", todo.id, res.error.kind)
            return self._failed(Outcome.failure(res.error, UPDATE_FAILED))

        updated = res.value
        # Entries we do not mirror stay absent.
        self._todos = [updated if t.id == todo.id else t for t in self._todos]
        logger.debug("Updated todo id=%s", todo.id)
        return Outcome.success(updated)

    async def delete(self, todo_id: int) -> Outcome[None]:
        self.last_error = None
        res = await self._api.delete_todo(todo_id)
        if isinstance(res, Err):
            already_gone = isinstance(res.error, StatusError) and res.error.status_code == 404
            if not already_gone:
                logger.info("Delete failed id=%s kind=%s", todo_id, res.error.kind)
                return self._failed(Outcome.failure(res.error, DELETE_FAILED))
            logger.debug("Delete id=%s: already absent on server", todo_id)

        self._todos = [t for t in self._todos if t.id != todo_id]
        return Outcome.success(None)

    # ---- conveniences used by the console ----

    async def set_completed(self, todo_id: int, completed: bool) -> Outcome[Todo]:
        current = self.get(todo_id)
        if current is None:
            return self._failed(
                Outcome.failure(ValidationError(message=f"No todo with id {todo_id}", field="id"))
            )
        return await self.update(current.with_completed(completed))

    async def rename(self, todo_id: int, title: str) -> Outcome[Todo]:
        current = self.get(todo_id)
        if current is None:
            return self._failed(
                Outcome.failure(ValidationError(message=f"No todo with id {todo_id}", field="id"))
            )
        return await self.update(current.with_title(title))
