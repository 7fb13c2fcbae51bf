"""Explicit holder of the learner's access/refresh credential pair.

One ``Session`` is created per application run and handed to every component
that issues authenticated requests. It is started after login, updated by
``refresh`` and cleared on logout or when a refresh fails.
"""

from __future__ import annotations

import logging
from threading import Lock
from typing import Callable, Protocol

import httpx
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PayloadValidationError

from course_player.constants.network_constants import LOGIN_PATH, REFRESH_PATH
from course_player.core.models import CredentialPair
from course_player.core.results import (
    AuthExpired,
    NetworkError,
    RequestFailedError,
    Result,
    SessionExpiredError,
)

logger = logging.getLogger(__name__)


class TokenRefresher(Protocol):
    def refresh(self, refresh_token: str) -> Result[CredentialPair]: ...


class LoginRequest(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    """Credential pair as returned by the login and refresh endpoints."""

    model_config = ConfigDict(populate_by_name=True)

    access_token: str = Field(alias="accessToken", min_length=1)
    refresh_token: str | None = Field(default=None, alias="refreshToken")
    user_type: str | None = Field(default=None, alias="userType")


class AuthApi:
    """HTTP calls that obtain credential pairs from the backend."""

    def __init__(self, http: httpx.Client) -> None:
        self._http = http

    def login(self, email: str, password: str) -> Result[CredentialPair]:
        body = LoginRequest(email=email, password=password).model_dump()
        return self._post_for_tokens(LOGIN_PATH, body, fallback_refresh=None)

    def refresh(self, refresh_token: str) -> Result[CredentialPair]:
        return self._post_for_tokens(REFRESH_PATH, {"refreshToken": refresh_token}, fallback_refresh=refresh_token)

    def _post_for_tokens(
        self, path: str, body: dict[str, str], fallback_refresh: str | None
    ) -> Result[CredentialPair]:
        try:
            response = self._http.post(path, json=body)
        except httpx.HTTPError as exc:
            return Result.fail(NetworkError(f"Could not reach {path}: {exc}"))

        if response.status_code in (401, 403):
            return Result.fail(AuthExpired(f"{path} rejected the credentials."))
        if response.is_error:
            return Result.fail(RequestFailedError(response.status_code))

        try:
            tokens = TokenResponse.model_validate(response.json())
        except (ValueError, PayloadValidationError) as exc:
            return Result.fail(RequestFailedError(response.status_code, f"Unexpected token response: {exc}"))

        refresh_token = tokens.refresh_token or fallback_refresh
        if not refresh_token:
            return Result.fail(RequestFailedError(response.status_code, "Token response has no refresh token."))
        return Result.ok(CredentialPair(access_token=tokens.access_token, refresh_token=refresh_token))


class Session:
    """Process-wide credential state with coalesced refreshes."""

    def __init__(self, refresher: TokenRefresher | None = None, credentials: CredentialPair | None = None) -> None:
        self._lock = Lock()
        self._refresh_lock = Lock()
        self._refresher = refresher
        self._credentials = credentials
        self._cleared_listeners: list[Callable[[], None]] = []

    def start(self, credentials: CredentialPair) -> None:
        with self._lock:
            self._credentials = credentials
        logger.info("Session started")

    def login(self, auth_api: AuthApi, email: str, password: str) -> Result[CredentialPair]:
        """Sign in through the backend and start the session with the issued pair."""
        outcome = auth_api.login(email, password)
        if outcome.is_ok:
            self.start(outcome.value)
        return outcome

    def current_access_credential(self) -> str | None:
        with self._lock:
            return self._credentials.access_token if self._credentials else None

    def is_authenticated(self) -> bool:
        return self.current_access_credential() is not None

    def refresh(self, stale_access_token: str | None = None) -> Result[str]:
        """Obtain a new access credential.

        Concurrent callers serialize on the refresh lock. A caller whose
        ``stale_access_token`` was already replaced by another refresh gets the
        new credential without a second round-trip.
        """
        with self._refresh_lock:
            with self._lock:
                credentials = self._credentials
            if credentials is None:
                return Result.fail(SessionExpiredError("Not signed in."))
            if stale_access_token is not None and credentials.access_token != stale_access_token:
                return Result.ok(credentials.access_token)
            if self._refresher is None:
                self.clear()
                return Result.fail(SessionExpiredError("Session cannot be refreshed."))

            outcome = self._refresher.refresh(credentials.refresh_token)
            if not outcome.is_ok:
                logger.warning("Credential refresh failed: %s", outcome.error)
                self.clear()
                return Result.fail(SessionExpiredError(f"Session expired: {outcome.error}"))

            with self._lock:
                self._credentials = outcome.value
            logger.info("Access credential refreshed")
            return Result.ok(outcome.value.access_token)

    def clear(self) -> None:
        with self._lock:
            had_credentials = self._credentials is not None
            self._credentials = None
            listeners = list(self._cleared_listeners)
        if had_credentials:
            logger.info("Session cleared")
            for listener in listeners:
                listener()

    def subscribe_cleared(self, listener: Callable[[], None]) -> None:
        """Register a callback that sends the learner back to the sign-in entry point."""
        with self._lock:
            self._cleared_listeners.append(listener)
