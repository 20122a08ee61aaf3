from fastapi import APIRouter, Response
from pydantic import Field

from taskvault.core.db import ApiModel
from taskvault.core.modules.user.models import UserView
from taskvault.web.deps import AppDep, CurrentUserIdDep, clear_session_cookie, set_session_cookie
from taskvault.web.openapi import ApiResponse, ErrorResponse, MessageResponse

router = APIRouter(tags=["auth"])


class RegisterRequest(ApiModel):
    """Account registration request."""

    email: str = Field(..., description="Email address, used as the login name")
    password: str = Field(..., description="Password, 6 to 72 bytes")


class LoginRequest(ApiModel):
    """Authentication request."""

    email: str = Field(..., description="Email address")
    password: str = Field(..., description="Password")


class UserPayload(ApiModel):
    user: UserView


@router.post(
    "/auth/register",
    summary="Register account",
    description="Create an account and start a session. The session token is set as an HttpOnly cookie.",
    operation_id="register",
    status_code=201,
    responses={
        201: {"description": "Account created"},
        400: {"model": ErrorResponse, "description": "Invalid email or password"},
        409: {"model": ErrorResponse, "description": "Email already registered"},
    },
)
async def register(data: RegisterRequest, app: AppDep, response: Response) -> ApiResponse[UserPayload]:
    user, token = await app.register(data.email, data.password)
    set_session_cookie(response, app, token)
    return ApiResponse(message="User registered successfully", data=UserPayload(user=user))


@router.post(
    "/auth/login",
    summary="Authenticate user",
    description="Authenticate with email and password. The session token is set as an HttpOnly cookie.",
    operation_id="login",
    responses={
        200: {"description": "Successfully authenticated"},
        400: {"model": ErrorResponse, "description": "Invalid request"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
    },
)
async def login(data: LoginRequest, app: AppDep, response: Response) -> ApiResponse[UserPayload]:
    """Authenticate user and create session."""
    user, token = await app.login(data.email, data.password)
    set_session_cookie(response, app, token)
    return ApiResponse(message="Login successful", data=UserPayload(user=user))


@router.post(
    "/auth/logout",
    summary="End session",
    description=(
        "Clear the session cookie. Tokens are not revocable server-side, "
        "so a copied token stays valid until it expires."
    ),
    operation_id="logout",
    responses={200: {"description": "Cookie cleared"}},
)
async def logout(app: AppDep, response: Response) -> MessageResponse:
    clear_session_cookie(response, app)
    return MessageResponse(message="Logged out successfully")


@router.get(
    "/auth/me",
    summary="Get current user",
    description="Get the account of the currently authenticated user.",
    operation_id="getCurrentUser",
    responses={
        200: {"description": "Current user"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "Account no longer exists"},
    },
)
async def get_me(app: AppDep, user_id: CurrentUserIdDep) -> ApiResponse[UserPayload]:
    user = await app.get_current_user(user_id)
    return ApiResponse(data=UserPayload(user=user))
