"""Utilities for exporting questions back to the quiz payload wire format."""

from __future__ import annotations

import json

from course_player.core.models import Question


def serialize_questions(questions: list[Question]) -> str:
    """Encode questions as the JSON text stored in a module's ``test.body``."""

    if not questions:
        raise ValueError("Cannot export an empty quiz.")
    return json.dumps([_serialize_question(question) for question in questions], ensure_ascii=False)


def _serialize_question(question: Question) -> dict[str, object]:
    return {
        "question": question.text,
        "ans_variants": dict(question.answer_variants),
        "question_num": question.question_number,
        "correct_var": question.correct_code,
    }
