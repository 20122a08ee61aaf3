"""Request gate: the single place where session tokens are checked.

Every inbound request is classified by path. Public paths pass through.
Protected paths need a valid ``token`` cookie; the verified subject is stored
on ``request.state.subject_id`` for handlers, which never re-verify.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

import structlog
from fastapi import Request
from fastapi.responses import RedirectResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from taskvault.core.modules.session.models import SESSION_COOKIE_NAME, TokenClaims
from taskvault.errors import AuthenticationError, TokenInvalidError, TokenMissingError
from taskvault.web.error_handlers import create_user_error_response

logger = structlog.get_logger(__name__)


class RouteAccess(StrEnum):
    PUBLIC = "public"
    PROTECTED_PAGE = "protected_page"
    PROTECTED_API = "protected_api"


@dataclass(frozen=True)
class RouteTable:
    """Path prefixes that require a session. Everything else is public."""

    protected_pages: tuple[str, ...]
    protected_api: tuple[str, ...]


DEFAULT_ROUTES = RouteTable(
    protected_pages=("/dashboard", "/tasks"),
    protected_api=("/api/tasks", "/api/auth/me"),
)


def _has_prefix(path: str, prefix: str) -> bool:
    # Match whole path segments only: "/tasks" covers "/tasks/1" but not "/tasksfoo"
    prefix = prefix.rstrip("/")
    return path == prefix or path.startswith(prefix + "/")


def classify_path(path: str, routes: RouteTable = DEFAULT_ROUTES) -> RouteAccess:
    """Classify a request path. API prefixes are checked before page prefixes."""
    if any(_has_prefix(path, prefix) for prefix in routes.protected_api):
        return RouteAccess.PROTECTED_API
    if any(_has_prefix(path, prefix) for prefix in routes.protected_pages):
        return RouteAccess.PROTECTED_PAGE
    return RouteAccess.PUBLIC


class RequestGateMiddleware(BaseHTTPMiddleware):
    """Rejects unauthenticated requests to protected paths.

    Pages are redirected to the login path; API calls get a 401 error
    envelope with TOKEN_MISSING or TOKEN_INVALID.
    """

    def __init__(
        self,
        app: ASGIApp,
        verify_token: Callable[[str], TokenClaims],
        login_path: str = "/login",
        routes: RouteTable = DEFAULT_ROUTES,
    ) -> None:
        super().__init__(app)
        self._verify_token = verify_token
        self._login_path = login_path
        self._routes = routes

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        access = classify_path(path, self._routes)
        if access is RouteAccess.PUBLIC:
            return await call_next(request)

        token = request.cookies.get(SESSION_COOKIE_NAME)
        if not token:
            logger.debug("request_gate_rejected", path=path, access=access, reason="token_missing")
            return self._reject(access, TokenMissingError())

        try:
            claims = self._verify_token(token)
        except TokenInvalidError as e:
            logger.debug("request_gate_rejected", path=path, access=access, reason="token_invalid")
            return self._reject(access, e)

        request.state.subject_id = claims.subject_id
        logger.debug("request_gate_passed", path=path, access=access, subject_id=claims.subject_id)
        return await call_next(request)

    def _reject(self, access: RouteAccess, error: AuthenticationError) -> Response:
        if access is RouteAccess.PROTECTED_API:
            return create_user_error_response(error)
        return RedirectResponse(self._login_path, status_code=307)
