"""Assembles the HTTP client stack behind a ``CoursePlayer``."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from course_player.client.auth_client import AuthorizedClient
from course_player.client.grade_submitter import GradeSubmitter
from course_player.client.module_provider import HttpModuleProvider
from course_player.client.session import AuthApi, Session
from course_player.core.course_player import CoursePlayer
from course_player.core.models import CredentialPair
from course_player.core.results import Result
from course_player.utils.settings import ClientSettings

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ClientStack:
    """A course player together with the session and HTTP client it runs on."""

    http: httpx.Client
    auth_api: AuthApi
    session: Session
    player: CoursePlayer

    def login(self, email: str, password: str) -> Result[CredentialPair]:
        return self.session.login(self.auth_api, email, password)

    def close(self) -> None:
        self.player.close()
        self.http.close()


def build_client_stack(
    settings: ClientSettings,
    http: httpx.Client | None = None,
    session: Session | None = None,
) -> ClientStack:
    """Wire session, authorized client, module provider and grade submitter into a player.

    ``http`` defaults to the client described by ``settings``. A given
    ``session`` is reused as is; otherwise a fresh one refreshes through the
    backend's auth endpoints.
    """
    http = http if http is not None else settings.create_http_client()
    auth_api = AuthApi(http)
    session = session if session is not None else Session(refresher=auth_api)
    client = AuthorizedClient(http, session)
    player = CoursePlayer(
        HttpModuleProvider(client),
        grade_submitter=GradeSubmitter(client),
        pass_percentage=settings.pass_percentage,
    )
    logger.debug("Client stack ready for %s", http.base_url)
    return ClientStack(http=http, auth_api=auth_api, session=session, player=player)
