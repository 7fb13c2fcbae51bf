"""Static metadata describing Course Player."""

APP_NAME = "Course Player"
APP_VERSION = "0.1"
APP_ABOUT_TEXT = (
    "Course Player steps learners through ordered course modules (text, video and quizzes), "
    "scores quizzes locally and reports grades to the course backend."
)
