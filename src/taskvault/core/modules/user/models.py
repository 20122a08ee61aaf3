from datetime import datetime
from uuid import UUID

from pydantic import Field

from taskvault.core.db import ApiModel, MongoModel
from taskvault.utils import now


class User(MongoModel):
    """User domain model with credentials.

    Indexed on email - unique.
    """

    email: str
    password_hash: str  # bcrypt hash
    created_at: datetime = Field(default_factory=now)


class UserView(ApiModel):
    """User account information (API representation)."""

    id: UUID = Field(..., description="User ID")
    email: str = Field(..., description="Email address")
    created_at: datetime = Field(..., description="Registration timestamp")

    @classmethod
    def from_domain(cls, user: User) -> "UserView":
        """Create view model from domain model."""
        return cls(id=user.id, email=user.email, created_at=user.created_at)
