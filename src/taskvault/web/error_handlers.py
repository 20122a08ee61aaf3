import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from taskvault.errors import InternalError, UserError, ValidationError

logger = logging.getLogger(__name__)

# Location prefixes FastAPI adds that mean nothing to API clients
_LOCATION_SOURCES = {"body", "query", "path", "header", "cookie"}


def create_json_error_response(status_code: int, message: str, error_code: str) -> JSONResponse:
    """Create the uniform JSON error envelope."""
    content = {"success": False, "message": message, "errorCode": error_code}
    return JSONResponse(status_code=status_code, content=content)


def create_user_error_response(exc: UserError) -> JSONResponse:
    return create_json_error_response(status_code=exc.status_code, message=exc.message, error_code=exc.error_code)


async def user_error_handler(_: Request, exc: Exception) -> Response:
    """Handle all UserError subclasses with their own status and code."""
    if not isinstance(exc, UserError):
        return await general_exception_handler(_, exc)
    return create_user_error_response(exc)


async def request_validation_error_handler(_: Request, exc: Exception) -> Response:
    """Render FastAPI request validation failures as VALIDATION_ERROR, first error only."""
    errors = exc.errors() if isinstance(exc, RequestValidationError) else []
    if not errors:
        return create_user_error_response(ValidationError())

    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part not in _LOCATION_SOURCES)
    message = f"{location}: {first['msg']}" if location else str(first["msg"])
    return create_user_error_response(ValidationError(message))


async def general_exception_handler(_: Request, exc: Exception) -> Response:
    """Handle unexpected errors (500)."""
    logger.exception("Unexpected error: %s", type(exc).__name__, exc_info=exc)
    return create_user_error_response(InternalError())
