from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any
from uuid import UUID

from pymongo.asynchronous.database import AsyncDatabase

from taskvault.config import Config
from taskvault.core.core import Core
from taskvault.core.modules.session.models import AuthToken, TokenClaims
from taskvault.core.modules.task.models import TaskChanges, TaskFilter, TaskPage, TaskStatus, TaskView
from taskvault.core.modules.task.validators import validate_changes, validate_description, validate_page, validate_title
from taskvault.core.modules.user.models import UserView
from taskvault.core.modules.user.validators import normalize_email, validate_login_password, validate_password
from taskvault.errors import TaskNotFoundError


class App:
    """Facade for all application operations.

    Callers pass the identity established by the request gate; ownership is
    checked here before delegating to Core.
    """

    def __init__(self, config: Config, database: AsyncDatabase[dict[str, Any]] | None = None) -> None:
        self._core = Core(config, database)

    @property
    def config(self) -> Config:
        return self._core.config

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    # === Sessions ===
    def verify_session_token(self, token: str) -> TokenClaims:
        """Verify a session token. Raises TokenInvalidError."""
        return self._core.tokens.verify(token)

    @property
    def session_max_age(self) -> int:
        """Session lifetime in seconds, for the cookie Max-Age."""
        return int(self._core.tokens.ttl.total_seconds())

    # === Accounts ===
    async def register(self, email: str, password: str) -> tuple[UserView, AuthToken]:
        """Create an account and open a session for it."""
        email = normalize_email(email)
        validate_password(password)
        user = await self._core.services.user.create_user(email, password)
        return UserView.from_domain(user), self._core.tokens.issue(str(user.id))

    async def login(self, email: str, password: str) -> tuple[UserView, AuthToken]:
        """Authenticate user and create session."""
        email = normalize_email(email)
        validate_login_password(password)
        user = await self._core.services.user.authenticate(email, password)
        return UserView.from_domain(user), self._core.tokens.issue(str(user.id))

    async def get_current_user(self, user_id: UUID) -> UserView:
        """Get current authenticated user profile."""
        user = await self._core.services.user.get_user(user_id)
        return UserView.from_domain(user)

    # === Tasks ===
    async def list_tasks(
        self,
        user_id: UUID,
        page: int = 1,
        limit: int = 10,
        status: TaskStatus | None = None,
        search: str | None = None,
    ) -> TaskPage:
        """Get paginated tasks of the current user, optionally filtered."""
        validate_page(page, limit)
        task_filter = TaskFilter(status=status, search=search.strip() if search else None)
        result = await self._core.services.task.list_tasks_by_owner(user_id, task_filter, page, limit)
        return TaskPage(tasks=result.items, pagination=result.pagination)

    async def create_task(
        self, user_id: UUID, title: str, description: str, status: TaskStatus = TaskStatus.TODO
    ) -> TaskView:
        """Create a task owned by the current user."""
        title = validate_title(title)
        description = validate_description(description)
        return await self._core.services.task.create_task(user_id, title, description, status)

    async def get_task(self, user_id: UUID, task_id: str) -> TaskView:
        """Get a task (owner only)."""
        task = await self._core.services.task.get_owned_task(self._parse_task_id(task_id), user_id)
        return self._core.services.task.reveal(task)

    async def update_task(self, user_id: UUID, task_id: str, changes: TaskChanges) -> TaskView:
        """Update task fields (partial update, owner only)."""
        changes = validate_changes(changes)
        task = await self._core.services.task.get_owned_task(self._parse_task_id(task_id), user_id)
        return await self._core.services.task.update_task(task.id, changes)

    async def delete_task(self, user_id: UUID, task_id: str) -> None:
        """Delete a task (owner only)."""
        task = await self._core.services.task.get_owned_task(self._parse_task_id(task_id), user_id)
        await self._core.services.task.delete_task(task.id)

    # === Private resolver methods ===
    @staticmethod
    def _parse_task_id(task_id: str) -> UUID:
        """Parse a task id from a URL. Malformed ids are reported as not found."""
        try:
            return UUID(task_id)
        except ValueError as e:
            raise TaskNotFoundError from e
