"""Application entry points: the development course backend and the course client."""

from __future__ import annotations

from course_player.client.factory import ClientStack, build_client_stack
from course_player.constants.about import APP_NAME
from course_player.server.api_server import build_sample_state, run_api_server
from course_player.utils.logging_config import configure_logging
from course_player.utils.settings import ClientSettings


def main() -> None:
    """Initialize logging and run the development backend with a sample course."""
    settings = ClientSettings.from_env()
    logger = configure_logging(settings.log_level)
    logger.info("Starting %s development backend on %s:%s", APP_NAME, settings.host, settings.port)
    run_api_server(build_sample_state(), host=settings.host, port=settings.port)


def play(settings: ClientSettings | None = None, stack: ClientStack | None = None) -> int:
    """Sign in, open the configured course and log its outline.

    Returns a process exit code.
    """
    settings = settings or ClientSettings.from_env()
    logger = configure_logging(settings.log_level)
    if not (settings.email and settings.course_id):
        logger.error("Set COURSE_PLAYER_EMAIL, COURSE_PLAYER_PASSWORD and COURSE_PLAYER_COURSE_ID first")
        return 2

    stack = stack or build_client_stack(settings)
    try:
        signed_in = stack.login(settings.email, settings.password)
        if not signed_in.is_ok:
            logger.error("Sign-in failed: %s", signed_in.error)
            return 1

        handle = stack.player.open_course(settings.course_id)
        if not handle.result.is_ok:
            logger.error("Could not open course %s: %s", settings.course_id, handle.result.error)
            return 1

        for entry in stack.player.outline():
            logger.info("%s [%s]", entry.label, entry.status.value)
        logger.info("Progress %s", stack.player.progress_label())
        return 0
    finally:
        stack.close()


if __name__ == "__main__":
    main()
