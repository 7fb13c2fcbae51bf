"""Module content provider backed by the course API."""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic import ValidationError as PayloadValidationError

from course_player.client.auth_client import ApiRequest, AuthorizedClient
from course_player.constants.network_constants import MODULES_PATH_TEMPLATE
from course_player.core.models import (
    Course,
    Module,
    ModulePage,
    QuizContent,
    TextContent,
    VideoContent,
)
from course_player.core.results import MalformedCourseError, Result

logger = logging.getLogger(__name__)


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)


class CoursePayload(_CamelModel):
    id: str
    title: str
    description: str = ""
    approximate_time: str | None = Field(default=None, alias="approximateTime")
    image_url: str | None = Field(default=None, alias="imageUrl")


class VideoPayload(_CamelModel):
    id: str
    video_url: str = Field(alias="videoUrl")


class QuizPayload(_CamelModel):
    id: str | None = None
    body: str | None = None


class ModulePayload(_CamelModel):
    """Wire schema of a module; the populated payload must match ``moduleType``."""

    id: str
    course: CoursePayload
    module_type: Literal["TEXT", "VIDEO", "TEST"] = Field(alias="moduleType")
    module_num: int = Field(alias="moduleNum")
    module_title: str = Field(alias="moduleTitle")
    text: str | None = None
    video: VideoPayload | None = None
    test: QuizPayload | None = None

    @model_validator(mode="after")
    def _payload_matches_tag(self) -> "ModulePayload":
        populated = {
            "TEXT": self.text is not None,
            "VIDEO": self.video is not None,
            "TEST": self.test is not None,
        }
        if not populated[self.module_type]:
            raise ValueError(f"{self.module_type} module has no {self.module_type.lower()} payload")
        extra = [tag for tag, present in populated.items() if present and tag != self.module_type]
        if extra:
            raise ValueError(f"{self.module_type} module also carries {', '.join(extra)} payload")
        return self

    def to_module(self) -> Module:
        course = Course(
            id=self.course.id,
            title=self.course.title,
            description=self.course.description,
            approximate_time=self.course.approximate_time,
            image_url=self.course.image_url,
        )
        if self.module_type == "TEXT":
            content = TextContent(body=self.text or "")
        elif self.module_type == "VIDEO":
            content = VideoContent(video_id=self.video.id, video_url=self.video.video_url)
        else:
            content = QuizContent(test_id=self.test.id or self.id, body=self.test.body or "")
        return Module(
            id=self.id,
            course=course,
            module_num=self.module_num,
            module_title=self.module_title,
            content=content,
        )


class ModulesResponse(_CamelModel):
    total: int
    items: list[ModulePayload]

    @model_validator(mode="after")
    def _module_numbers_are_unique(self) -> "ModulesResponse":
        seen: set[int] = set()
        for item in self.items:
            if item.module_num in seen:
                raise ValueError(f"Module number {item.module_num} appears more than once")
            seen.add(item.module_num)
        return self


class HttpModuleProvider:
    """Fetches the ordered module list of a course."""

    def __init__(self, client: AuthorizedClient) -> None:
        self._client = client

    def fetch_modules(self, course_id: str) -> Result[ModulePage]:
        request = ApiRequest("GET", MODULES_PATH_TEMPLATE.format(course_id=course_id))
        outcome = self._client.send(request)
        if not outcome.is_ok:
            return Result.fail(outcome.error)

        try:
            payload = ModulesResponse.model_validate(outcome.value.json())
        except (ValueError, PayloadValidationError) as exc:
            logger.warning("Module list of course %s is malformed: %s", course_id, exc)
            return Result.fail(MalformedCourseError(f"Module list of course {course_id} is malformed."))

        modules = [item.to_module() for item in payload.items]
        return Result.ok(ModulePage(total=payload.total, items=modules))
