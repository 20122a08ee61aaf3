"""Tests for the error taxonomy."""

import pytest

from taskvault.errors import (
    AuthenticationError,
    ForbiddenAccessError,
    InternalError,
    InvalidCredentialsError,
    NotFoundError,
    TaskNotFoundError,
    TokenInvalidError,
    TokenMissingError,
    UnauthorizedError,
    UserError,
    UserExistsError,
    UserNotFoundError,
    ValidationError,
)


@pytest.mark.parametrize(
    ("error_class", "status_code", "error_code"),
    [
        (InvalidCredentialsError, 401, "INVALID_CREDENTIALS"),
        (UnauthorizedError, 401, "UNAUTHORIZED"),
        (TokenMissingError, 401, "TOKEN_MISSING"),
        (TokenInvalidError, 401, "TOKEN_INVALID"),
        (UserExistsError, 409, "USER_EXISTS"),
        (UserNotFoundError, 404, "USER_NOT_FOUND"),
        (TaskNotFoundError, 404, "TASK_NOT_FOUND"),
        (ForbiddenAccessError, 403, "FORBIDDEN"),
        (ValidationError, 400, "VALIDATION_ERROR"),
        (InternalError, 500, "INTERNAL_ERROR"),
    ],
)
def test_error_maps_to_fixed_status_and_code(error_class, status_code, error_code):
    error = error_class()
    assert isinstance(error, UserError)
    assert error.status_code == status_code
    assert error.error_code == error_code
    assert error.message == error_class.default_message


def test_custom_message_overrides_default():
    error = ValidationError("Title is required")
    assert error.message == "Title is required"
    assert str(error) == "Title is required"
    assert error.error_code == "VALIDATION_ERROR"


def test_hierarchy():
    assert issubclass(TokenInvalidError, AuthenticationError)
    assert issubclass(TokenMissingError, AuthenticationError)
    assert issubclass(TaskNotFoundError, NotFoundError)
    assert issubclass(UserNotFoundError, NotFoundError)
    assert not issubclass(ForbiddenAccessError, NotFoundError)


def test_internal_error_message_is_generic():
    assert InternalError().message == "Internal server error"
