from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest

from course_player.client.auth_client import ApiRequest, AuthorizedClient
from course_player.client.session import Session
from course_player.core.models import CredentialPair
from course_player.core.results import (
    AuthExpired,
    NetworkError,
    RequestFailedError,
    Result,
    SessionExpiredError,
)

GRADE_REQUEST = ApiRequest("POST", "/api/test-grades/c1", json={"courseMaxTest": 3, "userGrade": 2})


class StubRefresher:
    def __init__(self, outcome: Result[CredentialPair]) -> None:
        self.outcome = outcome
        self.calls = 0

    def refresh(self, refresh_token: str) -> Result[CredentialPair]:
        self.calls += 1
        return self.outcome


class Backend:
    """Scripted responses keyed by call order; records the tokens presented."""

    def __init__(self, responders: list[Callable[[httpx.Request], httpx.Response]]) -> None:
        self.responders = responders
        self.tokens: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.tokens.append(request.headers.get("Authorization", ""))
        return self.responders[len(self.tokens) - 1](request)


def _status(code: int) -> Callable[[httpx.Request], httpx.Response]:
    return lambda request: httpx.Response(code, json={})


def _client(backend: Backend, session: Session) -> AuthorizedClient:
    http = httpx.Client(base_url="http://backend", transport=httpx.MockTransport(backend))
    return AuthorizedClient(http, session)


def _fresh_pair() -> Result[CredentialPair]:
    return Result.ok(CredentialPair("new-access", "new-refresh"))


def test_successful_request_uses_bearer_credential() -> None:
    backend = Backend([_status(201)])
    session = Session(StubRefresher(_fresh_pair()), CredentialPair("access", "refresh"))

    result = _client(backend, session).send(GRADE_REQUEST)

    assert result.is_ok
    assert backend.tokens == ["Bearer access"]


def test_expired_credential_is_refreshed_and_retried_once() -> None:
    backend = Backend([_status(401), _status(201)])
    refresher = StubRefresher(_fresh_pair())
    session = Session(refresher, CredentialPair("access", "refresh"))

    result = _client(backend, session).send(GRADE_REQUEST)

    assert result.is_ok
    assert refresher.calls == 1
    assert backend.tokens == ["Bearer access", "Bearer new-access"]


def test_failed_refresh_clears_session_and_abandons_request() -> None:
    backend = Backend([_status(401), _status(201)])
    refresher = StubRefresher(Result.fail(AuthExpired("refresh rejected")))
    session = Session(refresher, CredentialPair("access", "refresh"))
    signed_out: list[bool] = []
    session.subscribe_cleared(lambda: signed_out.append(True))

    result = _client(backend, session).send(GRADE_REQUEST)

    assert isinstance(result.error, SessionExpiredError)
    assert backend.tokens == ["Bearer access"]
    assert session.current_access_credential() is None
    assert signed_out == [True]


def test_second_auth_rejection_is_terminal() -> None:
    backend = Backend([_status(401), _status(401), _status(201)])
    refresher = StubRefresher(_fresh_pair())
    session = Session(refresher, CredentialPair("access", "refresh"))

    result = _client(backend, session).send(GRADE_REQUEST)

    assert isinstance(result.error, AuthExpired)
    assert len(backend.tokens) == 2
    assert refresher.calls == 1


@pytest.mark.parametrize("second_status", [500, 404])
def test_retry_failing_for_other_reasons_is_terminal(second_status: int) -> None:
    backend = Backend([_status(401), _status(second_status)])
    session = Session(StubRefresher(_fresh_pair()), CredentialPair("access", "refresh"))

    result = _client(backend, session).send(GRADE_REQUEST)

    assert isinstance(result.error, RequestFailedError)
    assert result.error.status_code == second_status
    assert len(backend.tokens) == 2


def test_transport_failure_is_a_network_error_without_retry() -> None:
    def broken(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    backend = Backend([broken, _status(201)])
    refresher = StubRefresher(_fresh_pair())
    session = Session(refresher, CredentialPair("access", "refresh"))

    result = _client(backend, session).send(GRADE_REQUEST)

    assert isinstance(result.error, NetworkError)
    assert len(backend.tokens) == 1
    assert refresher.calls == 0


def test_server_error_is_not_retried() -> None:
    backend = Backend([_status(503), _status(201)])
    session = Session(StubRefresher(_fresh_pair()), CredentialPair("access", "refresh"))

    result = _client(backend, session).send(GRADE_REQUEST)

    assert isinstance(result.error, RequestFailedError)
    assert len(backend.tokens) == 1


def test_missing_credential_goes_straight_to_refresh() -> None:
    backend = Backend([_status(201)])
    session = Session(StubRefresher(_fresh_pair()))

    result = _client(backend, session).send(GRADE_REQUEST)

    assert isinstance(result.error, SessionExpiredError)
    assert backend.tokens == []
