"""Decoding of quiz payloads stored in a module's ``test.body`` field.

Wire format (a JSON list, one object per question, order preserved):

    [
      {
        "question": "What is 2 + 2?",
        "ans_variants": {"a": "3", "b": "4", "c": "5"},
        "question_num": 1,
        "correct_var": "b"
      }
    ]

Architecture note:
    The payload is validated eagerly when a quiz module becomes active, so a
    broken quiz is reported before the learner answers anything instead of
    surfacing at scoring time. Structural checks live in the pydantic wire
    models; cross-question checks (empty quiz, duplicate numbers) run after.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, model_validator

from course_player.core.models import Question
from course_player.core.results import MalformedQuizError, Result

logger = logging.getLogger(__name__)


class QuestionPayload(BaseModel):
    """Wire schema for a single quiz question."""

    model_config = ConfigDict(strict=True, extra="ignore")

    question: str = Field(min_length=1)
    ans_variants: dict[str, str] = Field(min_length=1)
    question_num: int
    correct_var: str

    @model_validator(mode="after")
    def _correct_code_is_a_variant(self) -> "QuestionPayload":
        if self.correct_var not in self.ans_variants:
            raise ValueError(
                f"correct answer '{self.correct_var}' is not one of the answer variants"
            )
        return self

    def to_question(self) -> Question:
        return Question(
            text=self.question,
            question_number=self.question_num,
            answer_variants=dict(self.ans_variants),
            correct_code=self.correct_var,
        )


_QUIZ_ADAPTER = TypeAdapter(list[QuestionPayload])


def parse_quiz_payload(raw_payload: str | bytes | None) -> Result[list[Question]]:
    """Decode a raw quiz payload into questions or a ``MalformedQuizError``."""
    if raw_payload is None or not raw_payload.strip():
        return Result.fail(MalformedQuizError("Quiz payload is empty."))

    try:
        entries = _QUIZ_ADAPTER.validate_json(raw_payload)
    except ValidationError as exc:
        logger.warning("Rejected quiz payload: %s", _summarize(exc))
        return Result.fail(MalformedQuizError(f"Quiz payload is invalid: {_summarize(exc)}"))

    if not entries:
        return Result.fail(MalformedQuizError("Quiz does not contain any questions."))

    seen: set[int] = set()
    for entry in entries:
        if entry.question_num in seen:
            return Result.fail(
                MalformedQuizError(f"Question number {entry.question_num} appears more than once.")
            )
        seen.add(entry.question_num)

    return Result.ok([entry.to_question() for entry in entries])


def _summarize(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "payload"
    return f"{location}: {first.get('msg', 'invalid value')}"
