"""Service for turning a finished attempt into a score."""

from __future__ import annotations

from dataclasses import replace

from course_player.constants.course_constants import DEFAULT_PASS_PERCENTAGE
from course_player.core.models import GradeRecord, Question, QuizResult


def count_correct(questions: list[Question], selections: dict[int, str]) -> int:
    """Number of questions whose recorded selection equals the correct code."""
    return sum(1 for question in questions if question.is_correct(selections.get(question.question_number)))


def percentage(correct_count: int, total_questions: int) -> int:
    """Whole-number percentage, halves rounded up (66.5 -> 67)."""
    if total_questions <= 0:
        raise ValueError("A score needs at least one question.")
    return (200 * correct_count + total_questions) // (2 * total_questions)


def score_attempt(
    questions: list[Question],
    selections: dict[int, str],
    pass_percentage: int = DEFAULT_PASS_PERCENTAGE,
) -> QuizResult:
    """Compute the local result of an attempt. ``submitted`` starts out False."""
    total = len(questions)
    correct = count_correct(questions, selections)
    score = percentage(correct, total)
    return QuizResult(
        correct_count=correct,
        total_questions=total,
        percentage=score,
        passed=score >= pass_percentage,
        grade=GradeRecord(total_questions=total, correct_count=correct),
    )


def mark_submitted(result: QuizResult, submitted: bool) -> QuizResult:
    return replace(result, submitted=submitted)
