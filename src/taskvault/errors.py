from abc import ABC
from typing import ClassVar


class UserError(ABC, Exception):
    """Base class for user-related errors.

    All errors that inherit from UserError will have their messages
    displayed to the user. These errors should not contain any
    sensitive information.

    Each subclass maps to a fixed (status_code, error_code) pair and a
    default message used when none is given.
    """

    status_code: ClassVar[int] = 400
    error_code: ClassVar[str] = "BAD_REQUEST"
    default_message: ClassVar[str] = "Bad request"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class AuthenticationError(UserError):
    """Raised when authentication fails."""

    status_code = 401
    error_code = "UNAUTHORIZED"
    default_message = "Authentication failed"


class InvalidCredentialsError(AuthenticationError):
    """Raised when email or password does not match."""

    error_code = "INVALID_CREDENTIALS"
    default_message = "Invalid email or password"


class UnauthorizedError(AuthenticationError):
    """Raised when a request reaches a protected handler without an identity."""

    error_code = "UNAUTHORIZED"
    default_message = "Unauthorized access"


class TokenMissingError(AuthenticationError):
    """Raised when a protected route is called without a session token."""

    error_code = "TOKEN_MISSING"
    default_message = "Authentication token is missing"


class TokenInvalidError(AuthenticationError):
    """Raised when a session token is malformed, tampered with, or expired.

    All three cases share this one error code.
    """

    error_code = "TOKEN_INVALID"
    default_message = "Invalid or expired token"


class UserExistsError(UserError):
    """Raised when registering an email that already has an account."""

    status_code = 409
    error_code = "USER_EXISTS"
    default_message = "An account with this email already exists. Please login instead."


class NotFoundError(UserError):
    """Raised when a requested resource is not found."""

    status_code = 404
    error_code = "NOT_FOUND"
    default_message = "Document not found"


class UserNotFoundError(NotFoundError):
    error_code = "USER_NOT_FOUND"
    default_message = "User not found"


class TaskNotFoundError(NotFoundError):
    error_code = "TASK_NOT_FOUND"
    default_message = "Task not found"


class ForbiddenAccessError(UserError):
    """Raised when a user tries to access a resource they do not own."""

    status_code = 403
    error_code = "FORBIDDEN"
    default_message = "You don't have permission to access this resource"


class ValidationError(UserError):
    """Raised when user input fails validation."""

    status_code = 400
    error_code = "VALIDATION_ERROR"
    default_message = "Invalid request"


class InternalError(UserError):
    """Raised when an internal failure has been caught and must be reported opaquely.

    The original cause is logged where it is caught; only the generic message
    reaches the client.
    """

    status_code = 500
    error_code = "INTERNAL_ERROR"
    default_message = "Internal server error"
