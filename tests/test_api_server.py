"""End-to-end: the real client stack against the development backend."""

from __future__ import annotations

import random

import pytest
from fastapi.testclient import TestClient

from course_player.client import AuthApi, AuthorizedClient, GradeSubmitter, HttpModuleProvider, Session
from course_player.core.course_player import CoursePlayer, QuizView
from course_player.core.models import CredentialPair
from course_player.core.results import SessionExpiredError
from course_player.core.services.module_sequencer import AdvanceOutcome, SequencerState
from course_player.server.api_server import BackendState, build_sample_state, create_api_app


@pytest.fixture
def backend() -> BackendState:
    return build_sample_state()


@pytest.fixture
def http(backend: BackendState) -> TestClient:
    return TestClient(create_api_app(backend))


@pytest.fixture
def session(http: TestClient) -> Session:
    auth_api = AuthApi(http)
    session = Session(refresher=auth_api)
    session.login(auth_api, "learner@example.com", "learner").unwrap()
    return session


def _player(http: TestClient, session: Session) -> CoursePlayer:
    client = AuthorizedClient(http, session)
    return CoursePlayer(
        HttpModuleProvider(client),
        grade_submitter=GradeSubmitter(client),
        rng=random.Random(1),
    )


def _finish_quiz(player: CoursePlayer) -> None:
    view = player.active_view()
    assert isinstance(view, QuizView)
    engine = view.engine
    for question in engine.attempt.questions:
        engine.select(question.question_number, question.correct_code)
    result = engine.submit().unwrap()
    assert result.percentage == 100


def test_login_rejects_wrong_password(http: TestClient) -> None:
    response = http.post("/api/auth/login", json={"email": "learner@example.com", "password": "x"})
    assert response.status_code == 401


def test_modules_require_authentication(http: TestClient) -> None:
    assert http.get("/api/modules/course/intro-python").status_code == 401


def test_full_playthrough_records_grade(http: TestClient, session: Session, backend: BackendState) -> None:
    player = _player(http, session)
    player.open_course("intro-python")
    assert player.state is SequencerState.READY

    assert player.next_module().value is AdvanceOutcome.MOVED
    assert player.next_module().value is AdvanceOutcome.MOVED
    _finish_quiz(player)

    assert player.next_module().value is AdvanceOutcome.COURSE_COMPLETED
    assert len(backend.grades) == 1
    grade = backend.grades[0]
    assert (grade.course_id, grade.course_max_test, grade.user_grade) == ("intro-python", 2, 2)
    assert grade.email == "learner@example.com"


def test_expired_access_token_is_refreshed_transparently(
    http: TestClient, session: Session, backend: BackendState
) -> None:
    player = _player(http, session)
    player.open_course("intro-python")
    player.next_module()
    player.next_module()
    old_token = session.current_access_credential()

    backend.expire_access_tokens()
    _finish_quiz(player)

    assert player.quiz_engine().result().submitted is True
    assert session.current_access_credential() != old_token
    assert len(backend.grades) == 1


def test_revoked_refresh_token_ends_session_but_keeps_result(
    http: TestClient, session: Session, backend: BackendState
) -> None:
    signed_out: list[bool] = []
    session.subscribe_cleared(lambda: signed_out.append(True))
    player = _player(http, session)
    player.open_course("intro-python")
    player.next_module()
    player.next_module()

    backend.expire_access_tokens()
    backend.revoke_refresh_tokens()
    _finish_quiz(player)

    result = player.quiz_engine().result()
    assert result.correct_count == 2
    assert result.submitted is False
    assert signed_out == [True]
    assert not session.is_authenticated()
    assert backend.grades == []


def test_unknown_course_is_a_load_error(http: TestClient, session: Session) -> None:
    player = _player(http, session)
    player.open_course("missing")

    assert player.state is SequencerState.ERROR


def test_grade_cannot_exceed_question_count(http: TestClient, session: Session) -> None:
    response = http.post(
        "/api/test-grades/intro-python",
        json={"courseMaxTest": 2, "userGrade": 3},
        headers={"Authorization": f"Bearer {session.current_access_credential()}"},
    )
    assert response.status_code == 422


def test_stale_session_cannot_reach_backend(http: TestClient) -> None:
    session = Session(refresher=AuthApi(http), credentials=CredentialPair("bogus", "bogus"))
    provider = HttpModuleProvider(AuthorizedClient(http, session))

    result = provider.fetch_modules("intro-python")

    assert isinstance(result.error, SessionExpiredError)
    assert not session.is_authenticated()
