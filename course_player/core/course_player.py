"""Business logic for playing through a course, shared by any front end."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from threading import Lock
from typing import Callable

from course_player.constants.course_constants import (
    COURSE_COMPLETE_MESSAGE,
    DEFAULT_PASS_PERCENTAGE,
    FINISH_QUIZ_FIRST_MESSAGE,
)
from course_player.core.content_renderer import ContentRenderer, TextView, VideoView, renderer
from course_player.core.models import Module, ModuleType, OutlineEntry, QuizContent
from course_player.core.results import CoursePlayerError, Result, ValidationError
from course_player.core.services.assessment_engine import AssessmentEngine, GradeSink
from course_player.core.services.module_sequencer import (
    AdvanceOutcome,
    LoadHandle,
    ModuleProvider,
    ModuleSequencer,
    SequencerState,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class QuizView:
    title: str
    engine: AssessmentEngine
    unavailable_message: str | None = None


ModuleView = TextView | VideoView | QuizView


class CoursePlayer:
    """Facade over the module sequencer and the active quiz's assessment engine.

    A fresh engine (and therefore a fresh attempt) is created whenever a quiz
    module becomes active; leaving the module discards it.
    """

    def __init__(
        self,
        provider: ModuleProvider,
        grade_submitter: GradeSink | None = None,
        content_renderer: ContentRenderer = renderer,
        pass_percentage: int = DEFAULT_PASS_PERCENTAGE,
        rng: random.Random | None = None,
    ) -> None:
        self._lock = Lock()
        self._sequencer = ModuleSequencer(provider)
        self._grade_submitter = grade_submitter
        self._renderer = content_renderer
        self._pass_percentage = pass_percentage
        self._rng = rng
        self._engine: AssessmentEngine | None = None
        self._engine_module_id: str | None = None
        self._views: dict[ModuleType, Callable[[Module], ModuleView]] = {
            ModuleType.TEXT: self._renderer.render_text,
            ModuleType.VIDEO: self._renderer.render_video,
            ModuleType.TEST: self._quiz_view,
        }

    # --- Course lifecycle ---

    def open_course(self, course_id: str, in_background: bool = False) -> LoadHandle:
        self._drop_engine()
        logger.info("Opening course %s", course_id)
        return self._sequencer.load(course_id, in_background=in_background)

    def close(self) -> None:
        """Leave the course view; late network results no longer change any state."""
        self._sequencer.close()
        self._drop_engine()

    @property
    def state(self) -> SequencerState:
        return self._sequencer.state

    @property
    def error(self) -> CoursePlayerError | None:
        return self._sequencer.error

    @property
    def sequencer(self) -> ModuleSequencer:
        return self._sequencer

    def subscribe_course_completed(self, listener: Callable[[], None]) -> None:
        self._sequencer.subscribe_course_completed(listener)

    # --- Navigation ---

    def go_to(self, index: int) -> bool:
        previous = self._sequencer.current_index
        moved = self._sequencer.go_to(index)
        if moved and index != previous:
            self._drop_engine()
        return moved

    def next_module(self) -> Result[AdvanceOutcome]:
        """Continue to the next module; a running quiz has to be finished first."""
        module = self._sequencer.active_module()
        if module is not None and module.module_type is ModuleType.TEST:
            engine = self.quiz_engine()
            if engine is not None and engine.error is None and not engine.is_completed():
                return Result.fail(ValidationError(FINISH_QUIZ_FIRST_MESSAGE))

        outcome = self._sequencer.advance()
        if outcome is AdvanceOutcome.MOVED:
            self._drop_engine()
        elif outcome is AdvanceOutcome.COURSE_COMPLETED:
            logger.info(COURSE_COMPLETE_MESSAGE)
        return Result.ok(outcome)

    # --- Active module ---

    def active_module(self) -> Module | None:
        return self._sequencer.active_module()

    def active_view(self) -> ModuleView | None:
        """Render the active module with the handler registered for its type."""
        module = self._sequencer.active_module()
        if module is None:
            return None
        return self._views[module.module_type](module)

    def quiz_engine(self) -> AssessmentEngine | None:
        """Engine of the active quiz module, created and validated on first use."""
        module = self._sequencer.active_module()
        if module is None or not isinstance(module.content, QuizContent):
            return None
        with self._lock:
            if self._engine is None or self._engine_module_id != module.id:
                engine = AssessmentEngine(
                    course_id=module.course_id,
                    grade_submitter=self._grade_submitter,
                    pass_percentage=self._pass_percentage,
                    rng=self._rng,
                )
                engine.load(module.content.body)
                self._engine = engine
                self._engine_module_id = module.id
            return self._engine

    def _quiz_view(self, module: Module) -> QuizView:
        engine = self.quiz_engine()
        return QuizView(title=module.module_title, engine=engine, unavailable_message=engine.unavailable_message)

    def _drop_engine(self) -> None:
        with self._lock:
            engine = self._engine
            self._engine = None
            self._engine_module_id = None
        if engine is not None:
            engine.discard()

    # --- Outline ---

    def outline(self) -> list[OutlineEntry]:
        return self._sequencer.module_statuses()

    def progress_label(self) -> str:
        return self._sequencer.progress_label()
