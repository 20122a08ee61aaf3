import asyncio
from typing import Any
from uuid import UUID

import structlog
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError

from taskvault.core.core import Service
from taskvault.core.modules.user.models import User
from taskvault.core.modules.user.passwords import hash_password, verify_password
from taskvault.errors import InvalidCredentialsError, UserExistsError, UserNotFoundError

logger = structlog.get_logger(__name__)

DEMO_EMAIL = "demo@example.com"
DEMO_PASSWORD = "demo123"  # noqa: S105


class UserService(Service):
    """Manages user accounts and credential checks."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("users")

    async def find_user_by_email(self, email: str) -> User | None:
        """Get user by (normalized) email, or None."""
        doc = await self._collection.find_one({"email": email})
        return None if doc is None else User.model_validate(doc)

    async def get_user(self, user_id: UUID) -> User:
        """Get user by ID."""
        doc = await self._collection.find_one({"_id": user_id})
        if doc is None:
            raise UserNotFoundError
        return User.model_validate(doc)

    async def create_user(self, email: str, password: str) -> User:
        """Create user with hashed password. Email must already be normalized and validated."""
        if await self.find_user_by_email(email) is not None:
            raise UserExistsError

        password_hash = await asyncio.to_thread(hash_password, password)
        user = User(email=email, password_hash=password_hash)
        try:
            await self._collection.insert_one(user.to_mongo())
        except DuplicateKeyError as e:
            # Lost a race with a concurrent registration for the same email
            raise UserExistsError from e

        logger.info("user_created", user_id=user.id)
        return user

    async def authenticate(self, email: str, password: str) -> User:
        """Return the user if the password matches, else raise InvalidCredentialsError.

        Unknown email and wrong password are indistinguishable to the caller.
        """
        user = await self.find_user_by_email(email)
        if user is None:
            raise InvalidCredentialsError
        if not await asyncio.to_thread(verify_password, password, user.password_hash):
            raise InvalidCredentialsError
        return user

    async def ensure_demo_user_exists(self) -> None:
        """Create the demo account if not exists."""
        if await self.find_user_by_email(DEMO_EMAIL) is None:
            await self.create_user(DEMO_EMAIL, DEMO_PASSWORD)
            logger.info("demo_user_created", email=DEMO_EMAIL)

    async def on_start(self) -> None:
        """Create indexes and optionally seed the demo account."""
        await self._collection.create_index([("email", 1)], unique=True)
        if self.core.config.seed_demo_user:
            await self.ensure_demo_user_exists()
