"""HTTP client layer: session, authenticated requests and backend providers."""

from .auth_client import ApiRequest, AuthorizedClient
from .factory import ClientStack, build_client_stack
from .grade_submitter import GradeSubmitter
from .module_provider import HttpModuleProvider
from .session import AuthApi, Session

__all__ = [
    "ApiRequest",
    "AuthApi",
    "AuthorizedClient",
    "ClientStack",
    "GradeSubmitter",
    "HttpModuleProvider",
    "Session",
    "build_client_stack",
]
