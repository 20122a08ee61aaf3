import re
from typing import Any
from uuid import UUID

import structlog
from pymongo import ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase

from taskvault.core.core import Service
from taskvault.core.crypto.cipher import CipherError
from taskvault.core.modules.task.models import (
    DECRYPTION_FAILED_PLACEHOLDER,
    Task,
    TaskChanges,
    TaskFilter,
    TaskStatus,
    TaskView,
)
from taskvault.core.pagination import Pagination, PaginationResult
from taskvault.errors import ForbiddenAccessError, InternalError, TaskNotFoundError
from taskvault.utils import now

logger = structlog.get_logger(__name__)


class TaskService(Service):
    """Manages tasks; descriptions are encrypted on write and decrypted on every read."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("tasks")

    async def on_start(self) -> None:
        """Create indexes for owner lookup and newest-first listing."""
        await self._collection.create_index([("owner_id", 1)])
        await self._collection.create_index([("owner_id", 1), ("created_at", -1)])

    async def find_task_by_id(self, task_id: UUID) -> Task | None:
        doc = await self._collection.find_one({"_id": task_id})
        return None if doc is None else Task.model_validate(doc)

    async def get_owned_task(self, task_id: UUID, user_id: UUID) -> Task:
        """Load a task and check it belongs to the user.

        Existence is checked before ownership, so a task owned by someone else
        yields ForbiddenAccessError rather than TaskNotFoundError.
        """
        task = await self.find_task_by_id(task_id)
        if task is None:
            raise TaskNotFoundError
        if task.owner_id != user_id:
            logger.info("task_access_denied", task_id=task_id, user_id=user_id)
            raise ForbiddenAccessError
        return task

    async def list_tasks_by_owner(
        self, owner_id: UUID, task_filter: TaskFilter, page: int = 1, limit: int = 10
    ) -> PaginationResult[TaskView]:
        """Get a page of the owner's tasks, newest first.

        A task whose description cannot be decrypted is still listed, with a
        placeholder description, so one bad row does not fail the whole page.
        """
        query: dict[str, Any] = {"owner_id": owner_id}
        if task_filter.status is not None:
            query["status"] = task_filter.status
        if task_filter.search:
            query["title"] = {"$regex": re.escape(task_filter.search), "$options": "i"}

        total = await self._collection.count_documents(query)
        pagination = Pagination.build(page, limit, total)

        cursor = self._collection.find(query).sort([("created_at", -1)]).skip(pagination.offset).limit(limit)
        tasks = await Task.list_cursor(cursor)
        items = [self._reveal_or_placeholder(task) for task in tasks]

        logger.debug(
            "list_tasks",
            owner_id=owner_id,
            status=task_filter.status,
            search=task_filter.search,
            total=total,
            page=page,
            limit=limit,
            returned=len(items),
        )
        return PaginationResult(items=items, pagination=pagination)

    async def create_task(self, owner_id: UUID, title: str, description: str, status: TaskStatus) -> TaskView:
        """Create task from validated input, storing the description encrypted."""
        task = Task(
            owner_id=owner_id,
            title=title,
            description=self.core.cipher.encrypt(description),
            status=status,
        )
        await self._collection.insert_one(task.to_mongo())
        logger.info("task_created", task_id=task.id, owner_id=owner_id)
        return TaskView.from_domain(task, description)

    async def update_task(self, task_id: UUID, changes: TaskChanges) -> TaskView:
        """Apply a validated partial update; only provided fields change."""
        update: dict[str, Any] = {"updated_at": now()}
        if changes.title is not None:
            update["title"] = changes.title
        if changes.description is not None:
            update["description"] = self.core.cipher.encrypt(changes.description)
        if changes.status is not None:
            update["status"] = changes.status

        doc = await self._collection.find_one_and_update(
            {"_id": task_id}, {"$set": update}, return_document=ReturnDocument.AFTER
        )
        if doc is None:
            raise TaskNotFoundError
        task = Task.model_validate(doc)
        logger.info("task_updated", task_id=task_id, fields=sorted(update))
        if changes.description is not None:
            return TaskView.from_domain(task, changes.description)
        return self.reveal(task)

    async def delete_task(self, task_id: UUID) -> None:
        result = await self._collection.delete_one({"_id": task_id})
        if result.deleted_count == 0:
            raise TaskNotFoundError
        logger.info("task_deleted", task_id=task_id)

    def reveal(self, task: Task) -> TaskView:
        """Decrypt a single task for its owner; cipher failures become InternalError."""
        try:
            description = self.core.cipher.decrypt(task.description)
        except CipherError as e:
            logger.exception("task_decryption_failed", task_id=task.id, error=type(e).__name__)
            raise InternalError from e
        return TaskView.from_domain(task, description)

    def _reveal_or_placeholder(self, task: Task) -> TaskView:
        try:
            description = self.core.cipher.decrypt(task.description)
        except CipherError as e:
            logger.warning("task_decryption_failed", task_id=task.id, error=type(e).__name__)
            description = DECRYPTION_FAILED_PLACEHOLDER
        return TaskView.from_domain(task, description)
