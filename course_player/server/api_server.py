"""FastAPI development backend implementing the course API contract.

It serves module lists, issues and refreshes credentials, and records test
grades, all in memory. It backs local runs of the player and the end-to-end
tests of the HTTP client stack.
"""

from __future__ import annotations

import logging
import secrets
import time
from dataclasses import dataclass, field
from threading import Lock

import uvicorn
from fastapi import Depends, FastAPI, Header, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from course_player.client.grade_submitter import GradePayload
from course_player.constants.about import APP_ABOUT_TEXT, APP_NAME, APP_VERSION
from course_player.constants.network_constants import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    GRADES_PATH_TEMPLATE,
    LOGIN_PATH,
    MODULES_PATH_TEMPLATE,
    REFRESH_PATH,
)
from course_player.core.models import Question
from course_player.core.quiz_exporter import serialize_questions

logger = logging.getLogger(__name__)

DEFAULT_ACCESS_TTL_SECONDS: float = 15 * 60


class LoginPayload(BaseModel):
    email: str
    password: str


class RefreshPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    refresh_token: str = Field(alias="refreshToken")


@dataclass(slots=True)
class _Account:
    email: str
    password: str
    user_type: str = "STUDENT"


@dataclass(slots=True)
class StoredGrade:
    email: str
    course_id: str
    course_max_test: int
    user_grade: int


@dataclass
class BackendState:
    """In-memory accounts, tokens, course modules and recorded grades."""

    access_ttl_seconds: float = DEFAULT_ACCESS_TTL_SECONDS
    _lock: Lock = field(default_factory=Lock, repr=False)
    _accounts: dict[str, _Account] = field(default_factory=dict)
    _access_tokens: dict[str, tuple[str, float]] = field(default_factory=dict)
    _refresh_tokens: dict[str, str] = field(default_factory=dict)
    _modules: dict[str, list[dict[str, object]]] = field(default_factory=dict)
    grades: list[StoredGrade] = field(default_factory=list)

    def add_account(self, email: str, password: str, user_type: str = "STUDENT") -> None:
        with self._lock:
            self._accounts[email] = _Account(email=email, password=password, user_type=user_type)

    def set_course_modules(self, course_id: str, modules: list[dict[str, object]]) -> None:
        with self._lock:
            self._modules[course_id] = list(modules)

    def _issue_locked(self, email: str) -> dict[str, str]:
        access = secrets.token_urlsafe(24)
        refresh = secrets.token_urlsafe(32)
        self._access_tokens[access] = (email, time.monotonic() + self.access_ttl_seconds)
        self._refresh_tokens[refresh] = email
        return {
            "accessToken": access,
            "refreshToken": refresh,
            "userType": self._accounts[email].user_type,
        }

    def login(self, email: str, password: str) -> dict[str, str] | None:
        with self._lock:
            account = self._accounts.get(email)
            if account is None or account.password != password:
                return None
            return self._issue_locked(email)

    def refresh(self, refresh_token: str) -> dict[str, str] | None:
        """Rotate the pair: the presented refresh token is spent."""
        with self._lock:
            email = self._refresh_tokens.pop(refresh_token, None)
            if email is None:
                return None
            return self._issue_locked(email)

    def user_for_access_token(self, token: str) -> str | None:
        with self._lock:
            entry = self._access_tokens.get(token)
            if entry is None:
                return None
            email, expires_at = entry
            if time.monotonic() >= expires_at:
                del self._access_tokens[token]
                return None
            return email

    def expire_access_tokens(self) -> None:
        with self._lock:
            self._access_tokens.clear()

    def revoke_refresh_tokens(self) -> None:
        with self._lock:
            self._refresh_tokens.clear()

    def modules_for(self, course_id: str) -> list[dict[str, object]] | None:
        with self._lock:
            modules = self._modules.get(course_id)
            return list(modules) if modules is not None else None

    def record_grade(self, email: str, course_id: str, payload: GradePayload) -> StoredGrade:
        grade = StoredGrade(
            email=email,
            course_id=course_id,
            course_max_test=payload.course_max_test,
            user_grade=payload.user_grade,
        )
        with self._lock:
            self.grades.append(grade)
        return grade


def _get_state_dependency(state: BackendState):
    def dependency() -> BackendState:
        return state

    return dependency


def create_api_app(state: BackendState) -> FastAPI:
    """Create a FastAPI application wired to the provided backend state."""
    app = FastAPI(title=f"{APP_NAME} development backend", description=APP_ABOUT_TEXT, version=APP_VERSION)
    state_dep = _get_state_dependency(state)

    def current_user(
        authorization: str | None = Header(default=None),
        backend: BackendState = Depends(state_dep),
    ) -> str:
        scheme, _, token = (authorization or "").partition(" ")
        email = backend.user_for_access_token(token) if scheme.lower() == "bearer" and token else None
        if email is None:
            raise HTTPException(status_code=401, detail="Access token is missing or expired.")
        return email

    @app.post(LOGIN_PATH)
    def login(payload: LoginPayload, backend: BackendState = Depends(state_dep)) -> dict[str, str]:
        tokens = backend.login(payload.email, payload.password)
        if tokens is None:
            raise HTTPException(status_code=401, detail="Invalid email or password.")
        return tokens

    @app.post(REFRESH_PATH)
    def refresh(payload: RefreshPayload, backend: BackendState = Depends(state_dep)) -> dict[str, str]:
        tokens = backend.refresh(payload.refresh_token)
        if tokens is None:
            raise HTTPException(status_code=401, detail="Refresh token is invalid.")
        return tokens

    @app.get(MODULES_PATH_TEMPLATE.format(course_id="{course_id}"))
    def list_modules(
        course_id: str,
        _user: str = Depends(current_user),
        backend: BackendState = Depends(state_dep),
    ) -> dict[str, object]:
        modules = backend.modules_for(course_id)
        if modules is None:
            raise HTTPException(status_code=404, detail=f"Course {course_id} not found.")
        return {"total": len(modules), "items": modules}

    @app.post(GRADES_PATH_TEMPLATE.format(course_id="{course_id}"), status_code=201)
    def save_test_grade(
        course_id: str,
        payload: GradePayload,
        user: str = Depends(current_user),
        backend: BackendState = Depends(state_dep),
    ) -> dict[str, object]:
        if backend.modules_for(course_id) is None:
            raise HTTPException(status_code=404, detail=f"Course {course_id} not found.")
        if payload.user_grade > payload.course_max_test:
            raise HTTPException(status_code=422, detail="Grade exceeds the number of questions.")
        grade = backend.record_grade(user, course_id, payload)
        logger.info("Recorded grade %s/%s for %s", grade.user_grade, grade.course_max_test, user)
        return {
            "courseId": course_id,
            "courseMaxTest": grade.course_max_test,
            "userGrade": grade.user_grade,
        }

    return app


def build_sample_state() -> BackendState:
    """Backend state with one demo learner and a three-module course."""
    state = BackendState()
    state.add_account("learner@example.com", "learner")
    course = {
        "id": "intro-python",
        "title": "Introduction to Python",
        "description": "A short tour of the language.",
        "approximateTime": "30 min",
        "imageUrl": None,
    }
    quiz = serialize_questions(
        [
            Question(
                text="Which keyword defines a function?",
                question_number=1,
                answer_variants={"a": "def", "b": "func", "c": "lambda:"},
                correct_code="a",
            ),
            Question(
                text="What does len([1, 2, 3]) return?",
                question_number=2,
                answer_variants={"a": "2", "b": "3", "c": "6"},
                correct_code="b",
            ),
        ]
    )
    state.set_course_modules(
        course["id"],
        [
            {
                "id": "m1", "course": course, "moduleType": "TEXT", "moduleNum": 1,
                "moduleTitle": "Why Python", "text": "Python is readable.\nIt ships with batteries included.",
                "video": None, "test": None,
            },
            {
                "id": "m2", "course": course, "moduleType": "VIDEO", "moduleNum": 2,
                "moduleTitle": "First steps", "text": None,
                "video": {"id": "v1", "videoUrl": "https://www.youtube.com/embed/kqtD5dpn9C8"}, "test": None,
            },
            {
                "id": "m3", "course": course, "moduleType": "TEST", "moduleNum": 3,
                "moduleTitle": "Check yourself", "text": None, "video": None,
                "test": {"id": "t1", "body": quiz},
            },
        ],
    )
    return state


def run_api_server(state: BackendState, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> None:
    """Serve the backend in the foreground until interrupted."""
    uvicorn.run(create_api_app(state), host=host, port=port, log_level="info")
