"""Domain models for the course player."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ModuleType(str, Enum):
    """Type tag of a course module, matching the backend's ``moduleType``."""

    TEXT = "TEXT"
    VIDEO = "VIDEO"
    TEST = "TEST"


class ModuleStatus(str, Enum):
    """Outline status of a module relative to the learner's progress."""

    CURRENT = "current"
    VISITED = "visited"
    LOCKED = "locked"


class AttemptState(str, Enum):
    ACTIVE = "active"
    SUBMITTING = "submitting"
    COMPLETED = "completed"


@dataclass(frozen=True, slots=True)
class Course:
    """Course metadata shared by every module of the course."""

    id: str
    title: str
    description: str = ""
    approximate_time: str | None = None
    image_url: str | None = None


@dataclass(frozen=True, slots=True)
class TextContent:
    body: str


@dataclass(frozen=True, slots=True)
class VideoContent:
    video_id: str
    video_url: str


@dataclass(frozen=True, slots=True)
class QuizContent:
    """Raw quiz payload; parsed by the assessment engine when the module opens."""

    test_id: str
    body: str


ModuleContent = TextContent | VideoContent | QuizContent

_CONTENT_TYPES: dict[type, ModuleType] = {
    TextContent: ModuleType.TEXT,
    VideoContent: ModuleType.VIDEO,
    QuizContent: ModuleType.TEST,
}


@dataclass(frozen=True, slots=True)
class Module:
    """One unit of course content. The type tag is derived from ``content``."""

    id: str
    course: Course
    module_num: int
    module_title: str
    content: ModuleContent

    def __post_init__(self) -> None:
        if type(self.content) not in _CONTENT_TYPES:
            raise TypeError(f"Unsupported module content: {type(self.content).__name__}")

    @property
    def module_type(self) -> ModuleType:
        return _CONTENT_TYPES[type(self.content)]

    @property
    def course_id(self) -> str:
        return self.course.id


@dataclass(frozen=True, slots=True)
class ModulePage:
    """Response of the module content provider."""

    total: int
    items: list[Module]


@dataclass(frozen=True, slots=True)
class Question:
    """Single-choice quiz question keyed by short answer codes."""

    text: str
    question_number: int
    answer_variants: dict[str, str]
    correct_code: str

    def is_correct(self, answer_code: str | None) -> bool:
        return answer_code is not None and answer_code == self.correct_code


@dataclass(frozen=True, slots=True)
class GradeRecord:
    """The score summary sent to the backend for a completed attempt."""

    total_questions: int
    correct_count: int

    def to_payload(self) -> dict[str, int]:
        return {"courseMaxTest": self.total_questions, "userGrade": self.correct_count}


@dataclass(frozen=True, slots=True)
class QuizResult:
    """Locally computed outcome of a completed attempt."""

    correct_count: int
    total_questions: int
    percentage: int
    passed: bool
    grade: GradeRecord
    submitted: bool = False


@dataclass(frozen=True, slots=True)
class CredentialPair:
    access_token: str
    refresh_token: str


@dataclass(slots=True)
class OutlineEntry:
    """Row of the course outline shown next to the active module."""

    index: int
    module: Module
    status: ModuleStatus
    label: str
