from __future__ import annotations

import logging

from course_player.constants.network_constants import DEFAULT_BASE_URL
from course_player.utils.logging_config import configure_logging
from course_player.utils.settings import ClientSettings


def test_defaults_when_environment_is_empty() -> None:
    settings = ClientSettings.from_env({})

    assert settings.base_url == DEFAULT_BASE_URL
    assert settings.pass_percentage == 70
    assert settings.log_level == "INFO"


def test_environment_overrides() -> None:
    settings = ClientSettings.from_env(
        {
            "COURSE_PLAYER_BASE_URL": "https://courses.example/ ",
            "COURSE_PLAYER_TIMEOUT_SECONDS": "2.5",
            "COURSE_PLAYER_PASS_PERCENTAGE": "80",
            "COURSE_PLAYER_PORT": "9001",
            "COURSE_PLAYER_LOG_LEVEL": "debug",
        }
    )

    assert settings.base_url == "https://courses.example"
    assert settings.timeout_seconds == 2.5
    assert settings.pass_percentage == 80
    assert settings.port == 9001
    assert settings.log_level == "DEBUG"


def test_http_client_targets_base_url() -> None:
    with ClientSettings(base_url="https://courses.example").create_http_client() as http:
        assert http.base_url.host == "courses.example"


def test_configure_logging_returns_package_logger() -> None:
    logger = configure_logging(logging.WARNING)
    assert logger.name == "course_player"
