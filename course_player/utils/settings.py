"""Environment-driven settings for the client and the development backend."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

import httpx

from course_player.constants.course_constants import DEFAULT_PASS_PERCENTAGE
from course_player.constants.network_constants import (
    DEFAULT_BASE_URL,
    DEFAULT_HOST,
    DEFAULT_PORT,
    DEFAULT_TIMEOUT_SECONDS,
)


@dataclass(frozen=True, slots=True)
class ClientSettings:
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    pass_percentage: int = DEFAULT_PASS_PERCENTAGE
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = "INFO"
    email: str = ""
    password: str = field(default="", repr=False)
    course_id: str = ""

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ClientSettings":
        env = os.environ if environ is None else environ
        return cls(
            base_url=(env.get("COURSE_PLAYER_BASE_URL") or DEFAULT_BASE_URL).strip().rstrip("/"),
            timeout_seconds=float(env.get("COURSE_PLAYER_TIMEOUT_SECONDS") or DEFAULT_TIMEOUT_SECONDS),
            pass_percentage=int(env.get("COURSE_PLAYER_PASS_PERCENTAGE") or DEFAULT_PASS_PERCENTAGE),
            host=(env.get("COURSE_PLAYER_HOST") or DEFAULT_HOST).strip(),
            port=int(env.get("COURSE_PLAYER_PORT") or DEFAULT_PORT),
            log_level=(env.get("COURSE_PLAYER_LOG_LEVEL") or "INFO").strip().upper(),
            email=(env.get("COURSE_PLAYER_EMAIL") or "").strip(),
            password=env.get("COURSE_PLAYER_PASSWORD") or "",
            course_id=(env.get("COURSE_PLAYER_COURSE_ID") or "").strip(),
        )

    def create_http_client(self) -> httpx.Client:
        """Plain HTTP client pointed at the backend; authentication is added per request."""
        return httpx.Client(
            base_url=self.base_url,
            timeout=self.timeout_seconds,
            headers={"Accept": "application/json"},
        )
