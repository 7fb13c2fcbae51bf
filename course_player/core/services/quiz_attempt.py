"""State of one run-through of a quiz's questions."""

from __future__ import annotations

import random
from uuid import uuid4

from course_player.core.models import AttemptState, Question, QuizResult
from course_player.core.results import Result, ValidationError


class QuizAttempt:
    """Shuffled presentation order, selections and lifecycle of one attempt."""

    def __init__(self, questions: list[Question], rng: random.Random | None = None) -> None:
        if not questions:
            raise ValueError("An attempt needs at least one question.")
        self.attempt_id: str = uuid4().hex
        self._questions: list[Question] = list(questions)
        self._by_number: dict[int, Question] = {q.question_number: q for q in self._questions}
        self._selections: dict[int, str] = {}
        self._position: int = 0
        self._state: AttemptState = AttemptState.ACTIVE
        self._result: QuizResult | None = None

        shuffle_rng = rng or random.Random()
        self._display_variants: dict[int, list[tuple[str, str]]] = {}
        for question in self._questions:
            # Independent Fisher-Yates shuffle per question.
            entries = list(question.answer_variants.items())
            shuffle_rng.shuffle(entries)
            self._display_variants[question.question_number] = entries

    @property
    def state(self) -> AttemptState:
        return self._state

    @property
    def questions(self) -> list[Question]:
        return list(self._questions)

    @property
    def result(self) -> QuizResult | None:
        return self._result

    def question_count(self) -> int:
        return len(self._questions)

    def display_variants(self, question_number: int) -> list[tuple[str, str]]:
        """Answer variants of a question in this attempt's shuffled order."""
        return list(self._display_variants[question_number])

    def selections(self) -> dict[int, str]:
        return dict(self._selections)

    def select(self, question_number: int, answer_code: str) -> Result[None]:
        """Record or overwrite the selection for a question."""
        if self._state is not AttemptState.ACTIVE:
            return Result.fail(ValidationError("Answers can only be changed while the quiz is in progress."))
        question = self._by_number.get(question_number)
        if question is None:
            return Result.fail(ValidationError(f"Unknown question number {question_number}."))
        if answer_code not in question.answer_variants:
            return Result.fail(
                ValidationError(f"'{answer_code}' is not an answer of question {question_number}.")
            )
        self._selections[question_number] = answer_code
        return Result.ok()

    def answered_count(self) -> int:
        return len(self._selections)

    def is_fully_answered(self) -> bool:
        return len(self._selections) == len(self._questions)

    # --- Question pointer ---

    def position(self) -> int:
        return self._position

    def current_question(self) -> Question:
        return self._questions[self._position]

    def move_to(self, position: int) -> Question:
        self._position = max(0, min(position, len(self._questions) - 1))
        return self.current_question()

    def is_last_question(self) -> bool:
        return self._position == len(self._questions) - 1

    # --- Lifecycle ---

    def mark_submitting(self) -> None:
        if self._state is not AttemptState.ACTIVE:
            raise RuntimeError("Only an active attempt can be submitted.")
        self._state = AttemptState.SUBMITTING

    def complete(self, result: QuizResult) -> None:
        self._state = AttemptState.COMPLETED
        self._result = result
