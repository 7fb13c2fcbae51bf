"""Authenticated request wrapper with a single refresh-and-retry policy."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from course_player.client.session import Session
from course_player.constants.network_constants import AUTH_FAILURE_STATUS
from course_player.core.results import AuthExpired, NetworkError, RequestFailedError, Result

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ApiRequest:
    """Description of one backend call, replayable for the auth retry."""

    method: str
    path: str
    json: Any = None
    params: dict[str, Any] | None = None


class AuthorizedClient:
    """Sends requests with the session's Bearer credential.

    On an authorization failure the credential is refreshed once and the
    request is replayed once. A failed refresh clears the session and the
    request is abandoned.
    """

    def __init__(self, http: httpx.Client, session: Session) -> None:
        self._http = http
        self._session = session

    @property
    def session(self) -> Session:
        return self._session

    def send(self, request: ApiRequest) -> Result[httpx.Response]:
        token = self._session.current_access_credential()
        if token is not None:
            first = self._issue(request, token)
            if not first.is_ok or first.value.status_code != AUTH_FAILURE_STATUS:
                return self._settle(request, first)
            logger.info("%s %s was rejected; refreshing credential", request.method, request.path)

        refreshed = self._session.refresh(stale_access_token=token)
        if not refreshed.is_ok:
            logger.warning("Abandoning %s %s: %s", request.method, request.path, refreshed.error)
            return Result.fail(refreshed.error)

        retried = self._issue(request, refreshed.value)
        if retried.is_ok and retried.value.status_code == AUTH_FAILURE_STATUS:
            return Result.fail(AuthExpired(f"{request.method} {request.path} rejected a refreshed credential."))
        return self._settle(request, retried)

    def _issue(self, request: ApiRequest, token: str) -> Result[httpx.Response]:
        try:
            response = self._http.request(
                request.method,
                request.path,
                json=request.json,
                params=request.params,
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as exc:
            return Result.fail(NetworkError(f"{request.method} {request.path} failed: {exc}"))
        return Result.ok(response)

    @staticmethod
    def _settle(request: ApiRequest, outcome: Result[httpx.Response]) -> Result[httpx.Response]:
        if not outcome.is_ok:
            return outcome
        response = outcome.value
        if response.is_error:
            logger.warning("%s %s returned HTTP %s", request.method, request.path, response.status_code)
            return Result.fail(RequestFailedError(response.status_code))
        return outcome
