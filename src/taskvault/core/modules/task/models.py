from datetime import datetime
from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, Field

from taskvault.core.db import ApiModel, MongoModel
from taskvault.core.pagination import Pagination
from taskvault.utils import now

DECRYPTION_FAILED_PLACEHOLDER = "[Decryption failed]"


class TaskStatus(StrEnum):
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"


class Task(MongoModel):
    """Personal task. Only the owner may read, change, or delete it.

    ``description`` holds the field cipher encoding, never plaintext.
    Indexed on owner_id and (owner_id, created_at).
    """

    owner_id: UUID
    title: str
    description: str  # encrypted
    status: TaskStatus = TaskStatus.TODO
    created_at: datetime = Field(default_factory=now)
    updated_at: datetime = Field(default_factory=now)


class TaskFilter(BaseModel):
    """Optional list filters; all set conditions must match."""

    status: TaskStatus | None = None
    search: str | None = None  # Case-insensitive substring of the title


class TaskChanges(BaseModel):
    """Partial update; None means leave unchanged."""

    title: str | None = None
    description: str | None = None  # plaintext, encrypted before storage
    status: TaskStatus | None = None

    def is_empty(self) -> bool:
        return self.title is None and self.description is None and self.status is None


class TaskView(ApiModel):
    """Task as returned to its owner, with the description decrypted."""

    id: UUID = Field(..., description="Task ID")
    user_id: UUID = Field(..., description="Owner user ID")
    title: str
    description: str = Field(..., description="Plaintext description")
    status: TaskStatus
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, task: Task, description: str) -> "TaskView":
        return cls(
            id=task.id,
            user_id=task.owner_id,
            title=task.title,
            description=description,
            status=task.status,
            created_at=task.created_at,
            updated_at=task.updated_at,
        )


class TaskPage(ApiModel):
    tasks: list[TaskView]
    pagination: Pagination
