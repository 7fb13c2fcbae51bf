"""Course and quiz constants shared across the core and client layers."""

DEFAULT_PASS_PERCENTAGE: int = 70

QUIZ_UNAVAILABLE_MESSAGE: str = "This quiz cannot be displayed."
COURSE_COMPLETE_MESSAGE: str = "Course completed!"
EMPTY_COURSE_MESSAGE: str = "This course has no modules yet."
FINISH_QUIZ_FIRST_MESSAGE: str = "Finish the quiz before moving on."
NO_CONTENT_MESSAGE: str = "<p><em>No content provided.</em></p>"
