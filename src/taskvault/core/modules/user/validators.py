from taskvault.core.modules.user.passwords import BCRYPT_MAX_BYTES
from taskvault.errors import ValidationError
from taskvault.utils import is_email


def normalize_email(email: str) -> str:
    """Validate an email address and return it in canonical (trimmed, lower-case) form.

    Raises:
        ValidationError: If the value does not look like an email address
    """
    email = email.strip().lower()
    if not is_email(email):
        raise ValidationError("Invalid email address")
    return email


def validate_password(password: str) -> None:
    """Validate password meets requirements for new accounts.

    Requirements:
    - Minimum length of 6 characters
    - Fewer than 100 characters
    - At most 72 bytes once UTF-8 encoded (bcrypt limit)

    Raises:
        ValidationError: If password doesn't meet requirements
    """
    if len(password) < 6:
        raise ValidationError("Password must be at least 6 characters")

    if len(password) >= 100:
        raise ValidationError("Password must be less than 100 characters")

    if len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
        raise ValidationError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes")


def validate_login_password(password: str) -> None:
    if not password:
        raise ValidationError("Password is required")
