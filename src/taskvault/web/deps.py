from typing import Annotated, cast
from uuid import UUID

from fastapi import Depends, Request, Response

from taskvault.app import App
from taskvault.core.modules.session.models import SESSION_COOKIE_NAME, AuthToken
from taskvault.errors import TokenInvalidError, UnauthorizedError


async def get_app(request: Request) -> App:
    return cast(App, request.app.state.app)


async def get_current_user_id(request: Request) -> UUID:
    """Identity established by the request gate.

    The token has already been verified by the gate; this only reads the
    subject it stored on the request.
    """
    subject_id = getattr(request.state, "subject_id", None)
    if subject_id is None:
        raise UnauthorizedError
    try:
        return UUID(subject_id)
    except ValueError as e:
        raise TokenInvalidError from e


def set_session_cookie(response: Response, app: App, token: AuthToken) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        max_age=app.session_max_age,
        path="/",
        secure=app.config.cookie_secure,
        httponly=True,
        samesite="lax",
    )


def clear_session_cookie(response: Response, app: App) -> None:
    response.delete_cookie(
        key=SESSION_COOKIE_NAME,
        path="/",
        secure=app.config.cookie_secure,
        httponly=True,
        samesite="lax",
    )


# Type aliases for dependencies
AppDep = Annotated[App, Depends(get_app)]
CurrentUserIdDep = Annotated[UUID, Depends(get_current_user_id)]
