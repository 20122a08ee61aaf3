"""Session token models."""

from datetime import datetime, timedelta
from typing import NewType

from pydantic import BaseModel

AuthToken = NewType("AuthToken", str)

SESSION_COOKIE_NAME = "token"
SESSION_TTL = timedelta(days=7)


class TokenClaims(BaseModel):
    """Verified claims carried by a session token."""

    subject_id: str
    issued_at: datetime
    expires_at: datetime
