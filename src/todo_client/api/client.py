# src/todo_client/api/client.py

from __future__ import annotations

import logging
import time
from typing import Any

import httpx
import pydantic
from pydantic import BaseModel

from ..core.errors import DecodeError, Err, Ok, Result, StatusError, TransportError
from ..core.models import QueryFilter, Todo, User
from ..session.session_store import SessionStore
from . import endpoints as ep
from .endpoints import Endpoint

logger = logging.getLogger(__name__)

_DETAIL_LIMIT = 300


def _short(text: str) -> str:
    text = (text or "").strip()
    if len(text) <= _DETAIL_LIMIT:
        return text
    return text[:_DETAIL_LIMIT] + "..."


def query_for_filter(flt: QueryFilter | None) -> ep.TodoListQuery:
    """Translate a QueryFilter into the list query, keeping only present fields."""
    if flt is None:
        return ep.TodoListQuery()
    return ep.TodoListQuery(completed=flt.completed, search=flt.search_text)


class ApiClient:
    """
    Typed request layer over the endpoint schema.

    Behavior:
    - path params substituted, only present query params encoded
    - Authorization: Bearer <token> attached only when the session holds a token
    - body serialized from the endpoint's body model
    - failures come back as Err(TransportError | StatusError | DecodeError), never raised
    - no retries; the session is read, never written
    """

    def __init__(
        self,
        session: SessionStore,
        *,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not base_url or not base_url.strip():
            raise ValueError("API base URL is not set. Set TODO_API_BASE_URL in your .env.")
        self._session = session
        self._base_url = base_url.rstrip("/")
        self._http = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(timeout),
            transport=transport,
            headers={"Accept": "application/json"},
        )

    @classmethod
    def from_settings(
        cls,
        session: SessionStore,
        settings: Any,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> ApiClient:
        return cls(
            session,
            base_url=str(getattr(settings, "api_base_url", "") or ""),
            timeout=float(getattr(settings, "http_timeout_seconds", 10.0)),
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # ---- request building ----

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {}
        token = self._session.get()
        if token is not None:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    @staticmethod
    def _check_model(endpoint: Endpoint, slot: str, value: BaseModel | None) -> None:
        expected = endpoint.body_model if slot == "body" else endpoint.query_model
        if value is None:
            if slot == "body" and expected is not None:
                raise TypeError(f"{endpoint.operation}: request body is required")
            return
        if expected is None:
            raise TypeError(f"{endpoint.operation}: endpoint takes no {slot}")
        if not isinstance(value, expected):
            raise TypeError(
                f"{endpoint.operation}: {slot} must be {expected.__name__}, got {type(value).__name__}"
            )

    def build_request(
        self,
        endpoint: Endpoint,
        *,
        path_params: dict[str, Any] | None = None,
        query: BaseModel | None = None,
        body: BaseModel | None = None,
    ) -> httpx.Request:
        self._check_model(endpoint, "query", query)
        self._check_model(endpoint, "body", body)

        path = endpoint.render_path(path_params)

        params: dict[str, str] | None = None
        if query is not None:
            to_params = getattr(query, "to_params", None)
            params = to_params() if callable(to_params) else query.model_dump(exclude_none=True)

        json_body = body.model_dump(mode="json") if body is not None else None

        return self._http.build_request(
            endpoint.method,
            path,
            params=params or None,
            json=json_body,
            headers=self._headers(),
        )

    # ---- decoding ----

    @staticmethod
    def _decode(endpoint: Endpoint, response: httpx.Response) -> Result[Any]:
        expected = endpoint.response
        if expected is None:
            return Ok(None)
        try:
            if isinstance(expected, type) and issubclass(expected, BaseModel):
                return Ok(expected.model_validate_json(response.content))
            return Ok(expected.validate_json(response.content))
        except pydantic.ValidationError as e:
            logger.info("API: %s returned an unexpected body (%d errors)", endpoint.operation, e.error_count())
            return Err(
                DecodeError(
                    message=f"Unexpected response from {endpoint.operation}",
                    operation=endpoint.operation,
                    cause=e,
                )
            )

    # ---- public API ----

    async def request(
        self,
        endpoint: Endpoint,
        *,
        path_params: dict[str, Any] | None = None,
        query: BaseModel | None = None,
        body: BaseModel | None = None,
    ) -> Result[Any]:
        req = self.build_request(endpoint, path_params=path_params, query=query, body=body)
        if endpoint.auth_required and "Authorization" not in req.headers:
            logger.debug("API: %s sent without a token", endpoint.operation)

        t0 = time.monotonic()
        try:
            response = await self._http.send(req)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.info("API: %s transport error (%s)", endpoint.operation, e.__class__.__name__)
            return Err(
                TransportError(
                    message=f"Could not reach the server ({e.__class__.__name__})",
                    operation=endpoint.operation,
                    cause=e,
                )
            )

        logger.debug(
            "API: %s -> %d (%.2fs)", endpoint.operation, response.status_code, time.monotonic() - t0
        )

        if not response.is_success:
            detail = _short(response.text)
            logger.info("API: %s failed status=%d", endpoint.operation, response.status_code)
            return Err(
                StatusError(
                    message=f"{endpoint.operation} failed with status {response.status_code}",
                    operation=endpoint.operation,
                    status_code=response.status_code,
                    detail=detail,
                )
            )

        return self._decode(endpoint, response)

    # ---- typed operations ----

    async def register(self, username: str, password: str) -> Result[User]:
        res = await self.request(ep.REGISTER, body=ep.Credentials(username=username, password=password))
        return Ok(res.value.to_user()) if isinstance(res, Ok) else res

    async def login(self, username: str, password: str) -> Result[str]:
        res = await self.request(ep.LOGIN, body=ep.Credentials(username=username, password=password))
        return Ok(res.value.token) if isinstance(res, Ok) else res

    async def list_todos(self, flt: QueryFilter | None = None) -> Result[list[Todo]]:
        res = await self.request(ep.LIST_TODOS, query=query_for_filter(flt))
        return Ok([r.to_todo() for r in res.value]) if isinstance(res, Ok) else res

    async def create_todo(self, title: str) -> Result[Todo]:
        res = await self.request(ep.CREATE_TODO, body=ep.TodoWrite(title=title, completed=False))
        return Ok(res.value.to_todo()) if isinstance(res, Ok) else res

    async def update_todo(self, todo: Todo) -> Result[Todo]:
        res = await self.request(
            ep.UPDATE_TODO,
            path_params={"id": todo.id},
            body=ep.TodoWrite(title=todo.title, completed=todo.completed),
        )
        return Ok(res.value.to_todo()) if isinstance(res, Ok) else res

    async def delete_todo(self, todo_id: int) -> Result[None]:
        return await self.request(ep.DELETE_TODO, path_params={"id": int(todo_id)})
