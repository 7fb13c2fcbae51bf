from __future__ import annotations

import json

import pytest

from course_player.core.models import (
    Course,
    GradeRecord,
    Module,
    ModulePage,
    Question,
    QuizContent,
    TextContent,
    VideoContent,
)
from course_player.core.results import Result

COURSE = Course(id="c1", title="Course One", description="Demo")


def make_question(number: int, correct: str, variants: dict[str, str] | None = None) -> Question:
    return Question(
        text=f"Question {number}?",
        question_number=number,
        answer_variants=variants or {"a": "Alpha", "b": "Beta", "c": "Gamma"},
        correct_code=correct,
    )


def quiz_body(questions: list[dict[str, object]]) -> str:
    return json.dumps(questions)


def raw_question(number: int, correct: str = "a", variants: dict[str, str] | None = None) -> dict[str, object]:
    return {
        "question": f"Question {number}?",
        "ans_variants": variants if variants is not None else {"a": "Alpha", "b": "Beta"},
        "question_num": number,
        "correct_var": correct,
    }


def text_module(num: int, body: str = "Hello\nWorld") -> Module:
    return Module(id=f"m{num}", course=COURSE, module_num=num, module_title=f"Text {num}", content=TextContent(body))


def video_module(num: int, url: str = "https://video.example/embed/1") -> Module:
    return Module(
        id=f"m{num}",
        course=COURSE,
        module_num=num,
        module_title=f"Video {num}",
        content=VideoContent(video_id=f"v{num}", video_url=url),
    )


def quiz_module(num: int, body: str) -> Module:
    return Module(
        id=f"m{num}",
        course=COURSE,
        module_num=num,
        module_title=f"Quiz {num}",
        content=QuizContent(test_id=f"t{num}", body=body),
    )


class FakeProvider:
    def __init__(self, outcome: Result[ModulePage]) -> None:
        self.outcome = outcome
        self.calls: list[str] = []

    def fetch_modules(self, course_id: str) -> Result[ModulePage]:
        self.calls.append(course_id)
        return self.outcome


class RecordingGradeSink:
    def __init__(self, outcome: Result[None] | None = None) -> None:
        self.outcome = outcome or Result.ok()
        self.submitted: list[tuple[str, GradeRecord]] = []

    def submit(self, course_id: str, grade: GradeRecord) -> Result[None]:
        self.submitted.append((course_id, grade))
        return self.outcome


def provider_for(modules: list[Module]) -> FakeProvider:
    return FakeProvider(Result.ok(ModulePage(total=len(modules), items=modules)))


@pytest.fixture
def three_questions() -> list[Question]:
    return [make_question(1, "b"), make_question(2, "a"), make_question(3, "a")]


@pytest.fixture
def grade_sink() -> RecordingGradeSink:
    return RecordingGradeSink()
