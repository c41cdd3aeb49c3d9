# src/todo_client/auth/service.py

from __future__ import annotations

"""
Authentication lifecycle over ApiClient + SessionStore.

State machine:
  ANONYMOUS -> AUTHENTICATING -> AUTHENTICATED
  AUTHENTICATED -> ANONYMOUS (logout)

Session is only written after the whole operation succeeded, so a failure always
leaves the previous state in place and a retry starts from scratch.
"""

import logging
import sqlite3
from enum import StrEnum
from typing import Any

from ..api.client import ApiClient
from ..core.errors import (
    DecodeError,
    Err,
    Outcome,
    PartialSignupError,
    StorageError,
    ValidationError,
)
from ..core.models import UNKNOWN_USER_ID, User
from ..session.session_store import SessionStore

logger = logging.getLogger(__name__)

LOGIN_FAILED = "Login failed"
INVALID_LOGIN_RESPONSE = "Invalid login response"
SIGNUP_FAILED = "Signup failed"
INVALID_REGISTER_RESPONSE = "Invalid register response"
LOGIN_AFTER_SIGNUP_FAILED = "Failed to log in after signup"
SESSION_NOT_SAVED = "Could not save the session"
PASSWORDS_DO_NOT_MATCH = "Passwords do not match"
USERNAME_REQUIRED = "Username is required"


class AuthState(StrEnum):
    ANONYMOUS = "anonymous"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


class AuthService:
    def __init__(
        self,
        api: ApiClient,
        session: SessionStore,
        *,
        min_password_length: int = 6,
    ) -> None:
        self._api = api
        self._session = session
        self._min_password_length = max(1, int(min_password_length))
        self._user: User | None = None
        self._state = AuthState.ANONYMOUS
        self.last_error: str | None = None

    @classmethod
    def from_settings(cls, api: ApiClient, session: SessionStore, settings: Any) -> AuthService:
        return cls(
            api,
            session,
            min_password_length=int(getattr(settings, "min_password_length", 6)),
        )

    # ---- read side ----

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def user(self) -> User | None:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._state == AuthState.AUTHENTICATED

    def restore(self) -> User | None:
        """
        Rebuild the in-memory projection from the persisted session (process start).

        A token without a readable user is still a session; the user stays unknown.
        """
        if self._session.get() is None:
            self._user = None
            self._state = AuthState.ANONYMOUS
            return None

        self._user = self._session.load_user()
        self._state = AuthState.AUTHENTICATED
        logger.info(
            "Session restored user=%s",
            self._user.username if self._user else "<unknown>",
        )
        return self._user

    # ---- validation ----

    def validate_signup(
        self, username: str, password: str, confirm_password: str | None = None
    ) -> ValidationError | None:
        if not (username or "").strip():
            return ValidationError(message=USERNAME_REQUIRED, field="username")
        if confirm_password is not None and password != confirm_password:
            return ValidationError(message=PASSWORDS_DO_NOT_MATCH, field="confirm_password")
        if len(password or "") < self._min_password_length:
            return ValidationError(
                message=f"Password should be at least {self._min_password_length} characters",
                field="password",
            )
        return None

    # ---- operations ----

    def _fail(self, prior: AuthState, outcome: Outcome[User]) -> Outcome[User]:
        self._state = prior
        self.last_error = outcome.message
        return outcome

    def _persist(self, token: str, user: User) -> StorageError | None:
        try:
            self._session.set(token, user=user)
        except sqlite3.Error as e:
            logger.warning("Could not persist session user=%s: %s", user.username, e)
            return StorageError(message=SESSION_NOT_SAVED, cause=e)
        return None

    def _succeed(self, user: User) -> Outcome[User]:
        self._user = user
        self._state = AuthState.AUTHENTICATED
        self.last_error = None
        return Outcome.success(user)

    async def login(self, username: str, password: str) -> Outcome[User]:
        prior = self._state
        self.last_error = None
        if not (username or "").strip():
            return self._fail(
                prior,
                Outcome.failure(ValidationError(message=USERNAME_REQUIRED, field="username")),
            )

        self._state = AuthState.AUTHENTICATING
        res = await self._api.login(username, password)
        if isinstance(res, Err):
            message = INVALID_LOGIN_RESPONSE if isinstance(res.error, DecodeError) else LOGIN_FAILED
            logger.info("Login failed user=%s kind=%s", username, res.error.kind)
            return self._fail(prior, Outcome.failure(res.error, message))

        user = User(id=UNKNOWN_USER_ID, username=username)
        not_saved = self._persist(res.value, user)
        if not_saved is not None:
            return self._fail(prior, Outcome.failure(not_saved, LOGIN_FAILED))

        logger.info("Logged in user=%s", username)
        return self._succeed(user)

    async def signup(
        self, username: str, password: str, confirm_password: str | None = None
    ) -> Outcome[User]:
        prior = self._state
        self.last_error = None

        invalid = self.validate_signup(username, password, confirm_password)
        if invalid is not None:
            return self._fail(prior, Outcome.failure(invalid))

        self._state = AuthState.AUTHENTICATING

        registered = await self._api.register(username, password)
        if isinstance(registered, Err):
            message = (
                INVALID_REGISTER_RESPONSE if isinstance(registered.error, DecodeError) else SIGNUP_FAILED
            )
            logger.info("Signup failed user=%s kind=%s", username, registered.error.kind)
            return self._fail(prior, Outcome.failure(registered.error, message))

        user = registered.value
        logged_in = await self._api.login(username, password)
        if isinstance(logged_in, Err):
            logger.warning("Registered user=%s id=%s but follow-up login failed", username, user.id)
            partial = PartialSignupError(
                message=LOGIN_AFTER_SIGNUP_FAILED,
                user_id=user.id,
                username=user.username,
                login_error=logged_in.error,
            )
            return self._fail(prior, Outcome.failure(partial))

        not_saved = self._persist(logged_in.value, user)
        if not_saved is not None:
            partial = PartialSignupError(
                message=LOGIN_AFTER_SIGNUP_FAILED,
                user_id=user.id,
                username=user.username,
                login_error=not_saved,
            )
            return self._fail(prior, Outcome.failure(partial))

        logger.info("Signed up user=%s id=%s", user.username, user.id)
        return self._succeed(user)

    def logout(self) -> None:
        """Local only: the service has no logout endpoint."""
        self._session.clear()
        self._user = None
        self._state = AuthState.ANONYMOUS
        self.last_error = None
        logger.info("Logged out")
