from typing import Any, TypeVar

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from pydantic import Field

from taskvault.core.db import ApiModel
from taskvault.core.modules.session.models import SESSION_COOKIE_NAME

T = TypeVar("T")

# (method, path) pairs that need no session
PUBLIC_ENDPOINTS = {
    ("POST", "/api/auth/register"),
    ("POST", "/api/auth/login"),
    ("POST", "/api/auth/logout"),
    ("GET", "/health"),
}


def set_custom_openapi(app: FastAPI) -> None:
    def custom_openapi() -> dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        openapi_schema = get_openapi(
            title="TaskVault API",
            version="0.1.0",
            summary="Personal task manager with encrypted task descriptions",
            routes=app.routes,
        )

        openapi_schema.setdefault("components", {})["securitySchemes"] = {
            "SessionCookie": {
                "type": "apiKey",
                "in": "cookie",
                "name": SESSION_COOKIE_NAME,
                "description": "Signed session token set by register/login",
            },
        }

        # Apply security globally (overridden for public endpoints)
        openapi_schema["security"] = [{"SessionCookie": []}]

        for path, path_item in openapi_schema["paths"].items():
            for method, operation in path_item.items():
                if (method.upper(), path) in PUBLIC_ENDPOINTS:
                    operation["security"] = []

        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi  # type: ignore[method-assign]


class ErrorResponse(ApiModel):
    """Standard error response format."""

    success: bool = Field(False, description="Always false for errors")
    message: str = Field(..., description="Human-readable error message")
    error_code: str = Field(..., description="Machine-readable error code")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"success": False, "message": "Invalid email or password", "errorCode": "INVALID_CREDENTIALS"},
                {"success": False, "message": "Task not found", "errorCode": "TASK_NOT_FOUND"},
                {"success": False, "message": "Invalid or expired token", "errorCode": "TOKEN_INVALID"},
            ]
        }
    }


class MessageResponse(ApiModel):
    """Success response without a payload."""

    success: bool = True
    message: str


class ApiResponse[T](ApiModel):
    """Success response wrapper."""

    success: bool = True
    message: str | None = None
    data: T
