"""Error kinds and the result container returned by fallible operations.

Network-facing and validating operations return a :class:`Result` instead of
raising, so callers branch on ``is_ok`` and every failure path can be asserted
on in tests. The error kinds are still exceptions: they carry a message and
``Result.unwrap`` raises them for callers that prefer to unwind.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


class CoursePlayerError(Exception):
    """Base class for every error kind reported by the course player."""


class NetworkError(CoursePlayerError):
    """Transport or connectivity failure."""


class RequestFailedError(CoursePlayerError):
    """The backend answered with a non-authorization HTTP error."""

    def __init__(self, status_code: int, message: str = "") -> None:
        super().__init__(message or f"Backend responded with HTTP {status_code}.")
        self.status_code = status_code


class AuthExpired(CoursePlayerError):
    """The backend rejected the access credential."""


class SessionExpiredError(CoursePlayerError):
    """Refreshing the credential failed; the learner has to sign in again."""


class MalformedQuizError(CoursePlayerError):
    """Quiz payload failed structural or referential validation."""


class MalformedCourseError(CoursePlayerError):
    """Module list response could not be decoded into modules."""


class ValidationError(CoursePlayerError):
    """An action was attempted in a state that does not allow it."""


class EmptyCourseError(CoursePlayerError):
    """The course has no modules."""


@dataclass(frozen=True, slots=True)
class Result(Generic[T]):
    """Success value or error kind, never both."""

    value: T | None = None
    error: CoursePlayerError | None = None

    @classmethod
    def ok(cls, value: T | None = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def fail(cls, error: CoursePlayerError) -> "Result[T]":
        return cls(error=error)

    @property
    def is_ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value or raise the stored error."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
