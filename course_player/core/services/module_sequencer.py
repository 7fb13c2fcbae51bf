"""Service for navigating a course's modules with one-way gating."""

from __future__ import annotations

import logging
from enum import Enum
from threading import Event, Lock, Thread
from typing import Callable, Protocol

from course_player.constants.course_constants import EMPTY_COURSE_MESSAGE
from course_player.core.models import Module, ModulePage, ModuleStatus, OutlineEntry
from course_player.core.results import CoursePlayerError, EmptyCourseError, Result

logger = logging.getLogger(__name__)


class ModuleProvider(Protocol):
    def fetch_modules(self, course_id: str) -> Result[ModulePage]: ...


class SequencerState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"
    COMPLETED = "completed"


class AdvanceOutcome(str, Enum):
    MOVED = "moved"
    COURSE_COMPLETED = "course_completed"
    NOT_READY = "not_ready"


class LoadHandle:
    """Tracks one ``load`` call. Cancelling it keeps late results out of the sequencer."""

    def __init__(self, course_id: str) -> None:
        self.course_id = course_id
        self._lock = Lock()
        self._cancelled = False
        self._done = Event()
        self._result: Result[list[Module]] | None = None

    def cancel(self) -> None:
        with self._lock:
            self._cancelled = True

    @property
    def cancelled(self) -> bool:
        with self._lock:
            return self._cancelled

    @property
    def done(self) -> bool:
        return self._done.is_set()

    @property
    def result(self) -> Result[list[Module]] | None:
        return self._result

    def wait(self, timeout: float | None = None) -> bool:
        return self._done.wait(timeout)

    def _finish(self, result: Result[list[Module]]) -> None:
        self._result = result
        self._done.set()


class ModuleSequencer:
    """Owns the current position and frontier over an ordered module list.

    Invariant once loaded: ``0 <= current_index <= frontier <= len(modules) - 1``.
    """

    def __init__(self, provider: ModuleProvider) -> None:
        self._lock = Lock()
        self._provider = provider
        self._state = SequencerState.IDLE
        self._modules: list[Module] = []
        self._current_index: int = 0
        self._frontier: int = 0
        self._error: CoursePlayerError | None = None
        self._pending: LoadHandle | None = None
        self._completed_listeners: list[Callable[[], None]] = []

    # --- Loading ---

    def load(self, course_id: str, in_background: bool = False) -> LoadHandle:
        """Fetch the modules of a course; the returned handle can cancel the load."""
        handle = LoadHandle(course_id)
        with self._lock:
            if self._pending is not None:
                self._pending.cancel()
            self._pending = handle
            self._reset_locked(SequencerState.LOADING)

        if in_background:
            Thread(target=self._run_load, args=(handle,), name="ModuleLoader", daemon=True).start()
        else:
            self._run_load(handle)
        return handle

    def _run_load(self, handle: LoadHandle) -> None:
        try:
            fetched = self._provider.fetch_modules(handle.course_id)
        except Exception as exc:
            # A load always ends in READY or ERROR and always finishes its handle.
            logger.exception("Module provider raised while loading course %s", handle.course_id)
            fetched = Result.fail(CoursePlayerError(f"Could not load course {handle.course_id}: {exc}"))

        if fetched.is_ok and not fetched.value.items:
            outcome: Result[list[Module]] = Result.fail(EmptyCourseError(EMPTY_COURSE_MESSAGE))
        elif fetched.is_ok:
            outcome = Result.ok(sorted(fetched.value.items, key=lambda module: module.module_num))
        else:
            outcome = Result.fail(fetched.error)

        with self._lock:
            if handle.cancelled or self._pending is not handle:
                logger.info("Discarding modules of course %s from an abandoned load", handle.course_id)
            else:
                self._pending = None
                if outcome.is_ok:
                    self._modules = outcome.value
                    self._state = SequencerState.READY
                    logger.info("Loaded %d module(s) for course %s", len(self._modules), handle.course_id)
                else:
                    self._error = outcome.error
                    self._state = SequencerState.ERROR
                    logger.warning("Could not load course %s: %s", handle.course_id, outcome.error)
        handle._finish(outcome)

    def close(self) -> None:
        """Abandon the course: cancel any in-flight load and forget the modules."""
        with self._lock:
            if self._pending is not None:
                self._pending.cancel()
                self._pending = None
            self._reset_locked(SequencerState.IDLE)

    def _reset_locked(self, state: SequencerState) -> None:
        self._state = state
        self._modules = []
        self._current_index = 0
        self._frontier = 0
        self._error = None

    # --- Navigation ---

    def go_to(self, index: int) -> bool:
        """Jump to a module already reached. Anything beyond the frontier is ignored."""
        with self._lock:
            if not self._modules or not 0 <= index <= self._frontier:
                return False
            self._current_index = index
            self._state = SequencerState.READY
            return True

    def advance(self) -> AdvanceOutcome:
        with self._lock:
            if not self._modules:
                return AdvanceOutcome.NOT_READY
            if self._current_index < len(self._modules) - 1:
                self._current_index += 1
                self._frontier = max(self._frontier, self._current_index)
                self._state = SequencerState.READY
                return AdvanceOutcome.MOVED
            self._state = SequencerState.COMPLETED
            listeners = list(self._completed_listeners)

        for listener in listeners:
            listener()
        return AdvanceOutcome.COURSE_COMPLETED

    def subscribe_course_completed(self, listener: Callable[[], None]) -> None:
        with self._lock:
            self._completed_listeners.append(listener)

    # --- Queries ---

    @property
    def state(self) -> SequencerState:
        with self._lock:
            return self._state

    @property
    def error(self) -> CoursePlayerError | None:
        with self._lock:
            return self._error

    @property
    def current_index(self) -> int:
        with self._lock:
            return self._current_index

    @property
    def frontier(self) -> int:
        with self._lock:
            return self._frontier

    def modules(self) -> list[Module]:
        with self._lock:
            return list(self._modules)

    def active_module(self) -> Module | None:
        with self._lock:
            if not self._modules:
                return None
            return self._modules[self._current_index]

    def module_statuses(self) -> list[OutlineEntry]:
        with self._lock:
            entries = []
            for index, module in enumerate(self._modules):
                if index == self._current_index:
                    status = ModuleStatus.CURRENT
                elif index <= self._frontier:
                    status = ModuleStatus.VISITED
                else:
                    status = ModuleStatus.LOCKED
                label = f"Module {module.module_num}: {module.module_title}"
                entries.append(OutlineEntry(index=index, module=module, status=status, label=label))
            return entries

    def progress_label(self) -> str:
        with self._lock:
            if not self._modules:
                return "0/0"
            return f"{self._current_index + 1}/{len(self._modules)}"
