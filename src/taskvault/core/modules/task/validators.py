from taskvault.core.modules.task.models import TaskChanges
from taskvault.errors import ValidationError

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 5000
PAGE_LIMIT_MAX = 100


def validate_title(title: str) -> str:
    title = title.strip()
    if not title:
        raise ValidationError("Title is required")
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationError(f"Title must be less than {TITLE_MAX_LENGTH} characters")
    return title


def validate_description(description: str) -> str:
    if not description:
        raise ValidationError("Description is required")
    if len(description) > DESCRIPTION_MAX_LENGTH:
        raise ValidationError(f"Description must be less than {DESCRIPTION_MAX_LENGTH} characters")
    return description


def validate_changes(changes: TaskChanges) -> TaskChanges:
    """Validate a partial update, returning it with normalized values.

    Raises:
        ValidationError: If no field is set or any set field is invalid
    """
    if changes.is_empty():
        raise ValidationError("No fields to update")
    return TaskChanges(
        title=None if changes.title is None else validate_title(changes.title),
        description=None if changes.description is None else validate_description(changes.description),
        status=changes.status,
    )


def validate_page(page: int, limit: int) -> None:
    if page < 1:
        raise ValidationError("Page must be at least 1")
    if not 1 <= limit <= PAGE_LIMIT_MAX:
        raise ValidationError(f"Limit must be between 1 and {PAGE_LIMIT_MAX}")
