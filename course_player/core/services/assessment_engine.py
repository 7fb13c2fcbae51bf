"""Runs quiz attempts for one quiz module and reports their grades."""

from __future__ import annotations

import logging
import random
from threading import Lock
from typing import Protocol

from course_player.constants.course_constants import DEFAULT_PASS_PERCENTAGE, QUIZ_UNAVAILABLE_MESSAGE
from course_player.core.models import AttemptState, GradeRecord, Question, QuizResult
from course_player.core.quiz_parser import parse_quiz_payload
from course_player.core.results import CoursePlayerError, Result, ValidationError
from course_player.core.services.quiz_attempt import QuizAttempt
from course_player.core.services.scoring import mark_submitted, score_attempt

logger = logging.getLogger(__name__)


class GradeSink(Protocol):
    def submit(self, course_id: str, grade: GradeRecord) -> Result[None]: ...


class AssessmentEngine:
    """Parses a quiz payload and drives its attempts to completion.

    The engine never holds its lock while the grade is being sent, so the
    attempt can be read (or discarded) while the submission is in flight.
    """

    def __init__(
        self,
        course_id: str,
        grade_submitter: GradeSink | None = None,
        pass_percentage: int = DEFAULT_PASS_PERCENTAGE,
        rng: random.Random | None = None,
    ) -> None:
        self._lock = Lock()
        self._course_id = course_id
        self._grade_submitter = grade_submitter
        self._pass_percentage = pass_percentage
        self._rng = rng or random.Random()
        self._questions: list[Question] = []
        self._attempt: QuizAttempt | None = None
        self._error: CoursePlayerError | None = None

    # --- Setup ---

    @staticmethod
    def parse(raw_payload: str | bytes | None) -> Result[list[Question]]:
        return parse_quiz_payload(raw_payload)

    def load(self, raw_payload: str | bytes | None) -> Result[QuizAttempt]:
        """Validate the payload and start the first attempt."""
        parsed = self.parse(raw_payload)
        if not parsed.is_ok:
            with self._lock:
                self._error = parsed.error
                self._questions = []
                self._attempt = None
            logger.warning("Quiz for course %s cannot be displayed: %s", self._course_id, parsed.error)
            return Result.fail(parsed.error)
        return Result.ok(self.start_attempt(parsed.value))

    def start_attempt(self, questions: list[Question]) -> QuizAttempt:
        with self._lock:
            self._error = None
            self._questions = list(questions)
            self._attempt = QuizAttempt(self._questions, rng=self._rng)
            return self._attempt

    def restart(self) -> Result[QuizAttempt]:
        """Discard the current attempt and start over with the same questions."""
        with self._lock:
            if not self._questions:
                return Result.fail(ValidationError("No quiz has been loaded."))
            self._attempt = QuizAttempt(self._questions, rng=self._rng)
            return Result.ok(self._attempt)

    def discard(self) -> None:
        """Drop the running attempt, e.g. when the learner navigates away."""
        with self._lock:
            self._attempt = None

    # --- State ---

    @property
    def error(self) -> CoursePlayerError | None:
        with self._lock:
            return self._error

    @property
    def unavailable_message(self) -> str | None:
        return QUIZ_UNAVAILABLE_MESSAGE if self.error is not None else None

    @property
    def attempt(self) -> QuizAttempt | None:
        with self._lock:
            return self._attempt

    def state(self) -> AttemptState | None:
        with self._lock:
            return self._attempt.state if self._attempt else None

    def result(self) -> QuizResult | None:
        with self._lock:
            return self._attempt.result if self._attempt else None

    def is_completed(self) -> bool:
        return self.state() is AttemptState.COMPLETED

    # --- Answering ---

    def select(self, question_number: int, answer_code: str) -> Result[None]:
        with self._lock:
            if self._attempt is None:
                return Result.fail(ValidationError("No quiz attempt is running."))
            return self._attempt.select(question_number, answer_code)

    def can_submit(self) -> bool:
        with self._lock:
            return (
                self._attempt is not None
                and self._attempt.state is AttemptState.ACTIVE
                and self._attempt.is_fully_answered()
            )

    def answered_count(self) -> int:
        with self._lock:
            return self._attempt.answered_count() if self._attempt else 0

    def display_variants(self, question_number: int) -> list[tuple[str, str]]:
        with self._lock:
            if self._attempt is None:
                return []
            return self._attempt.display_variants(question_number)

    # --- Question navigation ---

    def current_question(self) -> Question | None:
        with self._lock:
            return self._attempt.current_question() if self._attempt else None

    def next_question(self) -> Question | None:
        with self._lock:
            if self._attempt is None:
                return None
            return self._attempt.move_to(self._attempt.position() + 1)

    def previous_question(self) -> Question | None:
        with self._lock:
            if self._attempt is None:
                return None
            return self._attempt.move_to(self._attempt.position() - 1)

    def progress_fraction(self) -> float:
        with self._lock:
            if self._attempt is None:
                return 0.0
            return (self._attempt.position() + 1) / self._attempt.question_count()

    # --- Submission ---

    def submit(self) -> Result[QuizResult]:
        """Score the attempt, report the grade, and complete the attempt.

        A failed grade submission is logged and reflected in
        ``QuizResult.submitted``; the locally computed result is returned
        either way.
        """
        with self._lock:
            attempt = self._attempt
            if attempt is None:
                return Result.fail(ValidationError("No quiz attempt is running."))
            if attempt.state is not AttemptState.ACTIVE:
                return Result.fail(ValidationError("This attempt has already been submitted."))
            if not attempt.is_fully_answered():
                missing = attempt.question_count() - attempt.answered_count()
                return Result.fail(ValidationError(f"{missing} question(s) still need an answer."))
            result = score_attempt(attempt.questions, attempt.selections(), self._pass_percentage)
            attempt.mark_submitting()

        submitted = self._send_grade(result)
        final = mark_submitted(result, submitted)

        with self._lock:
            if self._attempt is attempt:
                attempt.complete(final)
            else:
                logger.info("Attempt %s was discarded before its grade was stored", attempt.attempt_id)
        return Result.ok(final)

    def _send_grade(self, result: QuizResult) -> bool:
        if self._grade_submitter is None:
            logger.debug("No grade submitter configured; keeping result local")
            return False
        try:
            outcome = self._grade_submitter.submit(self._course_id, result.grade)
        except Exception:
            # The attempt is already SUBMITTING and has to reach COMPLETED.
            logger.exception("Grade submitter for course %s raised", self._course_id)
            return False
        if not outcome.is_ok:
            logger.warning(
                "Grade for course %s was not saved (%s/%s correct): %s",
                self._course_id,
                result.correct_count,
                result.total_questions,
                outcome.error,
            )
        return outcome.is_ok
