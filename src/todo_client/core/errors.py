# src/todo_client/core/errors.py

from __future__ import annotations

"""
Failure taxonomy and result values.

Failures are plain values returned up the stack (Ok / Err, Outcome), not raised:
- TransportError: the request never completed (connection, timeout, ...)
- StatusError: the server answered with a non-success status
- DecodeError: the body did not match the expected shape
- ValidationError: a client-side precondition failed; no request was sent
- PartialSignupError: /register succeeded but the follow-up /login did not
- StorageError: the local session file could not be written
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Failure:
    message: str

    @property
    def kind(self) -> str:
        return type(self).__name__


@dataclass(frozen=True, slots=True)
class ApiError(Failure):
    """A failed ApiClient call. `operation` is "METHOD /path" of the endpoint."""

    operation: str = ""
    cause: BaseException | None = None


@dataclass(frozen=True, slots=True)
class TransportError(ApiError):
    pass


@dataclass(frozen=True, slots=True)
class StatusError(ApiError):
    status_code: int = 0
    detail: str = ""


@dataclass(frozen=True, slots=True)
class DecodeError(ApiError):
    pass


@dataclass(frozen=True, slots=True)
class ValidationError(Failure):
    field: str = ""


@dataclass(frozen=True, slots=True)
class StorageError(Failure):
    cause: BaseException | None = None


@dataclass(frozen=True, slots=True)
class PartialSignupError(Failure):
    user_id: int = 0
    username: str = ""
    login_error: Failure | None = None


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Err:
    error: ApiError

    @property
    def ok(self) -> bool:
        return False


Result = Ok[T] | Err


@dataclass(frozen=True, slots=True)
class Outcome(Generic[T]):
    """
    What services hand back to the UI: a value on success, otherwise a single
    user-facing message plus the underlying failure for logging/tests.
    """

    value: T | None = None
    error: Failure | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T | None = None) -> Outcome[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: Failure, message: str | None = None) -> Outcome[T]:
        return cls(error=error, message=message or error.message)
