"""Delivers quiz grades to the course backend."""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict, Field

from course_player.client.auth_client import ApiRequest, AuthorizedClient
from course_player.constants.network_constants import GRADES_PATH_TEMPLATE
from course_player.core.models import GradeRecord
from course_player.core.results import Result

logger = logging.getLogger(__name__)


class GradePayload(BaseModel):
    """Payload schema for a test grade write."""

    model_config = ConfigDict(populate_by_name=True)

    course_max_test: int = Field(alias="courseMaxTest", ge=1)
    user_grade: int = Field(alias="userGrade", ge=0)


class GradeSubmitter:
    """Posts a completed attempt's GradeRecord, scoped to a course."""

    def __init__(self, client: AuthorizedClient) -> None:
        self._client = client

    def submit(self, course_id: str, grade: GradeRecord) -> Result[None]:
        body = GradePayload.model_validate(grade.to_payload()).model_dump(by_alias=True)
        request = ApiRequest("POST", GRADES_PATH_TEMPLATE.format(course_id=course_id), json=body)
        outcome = self._client.send(request)
        if not outcome.is_ok:
            logger.warning("Grade submission for course %s failed: %s", course_id, outcome.error)
            return Result.fail(outcome.error)
        logger.info(
            "Saved grade %s/%s for course %s", grade.correct_count, grade.total_questions, course_id
        )
        return Result.ok()
