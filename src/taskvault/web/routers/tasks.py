"""Task-related API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query
from pydantic import Field

from taskvault.core.db import ApiModel
from taskvault.core.modules.task.models import TaskChanges, TaskPage, TaskStatus, TaskView
from taskvault.core.modules.task.validators import PAGE_LIMIT_MAX
from taskvault.web.deps import AppDep, CurrentUserIdDep
from taskvault.web.openapi import ApiResponse, ErrorResponse, MessageResponse

router: APIRouter = APIRouter(tags=["tasks"])


class CreateTaskRequest(ApiModel):
    """Request to create a new task."""

    title: str = Field(..., description="Task title, 1-199 characters")
    description: str = Field(..., description="Task description, stored encrypted")
    status: TaskStatus = Field(TaskStatus.TODO, description="Initial status")

    model_config = {
        "json_schema_extra": {
            "examples": [{"title": "Renew passport", "description": "Photos are in the desk drawer", "status": "TODO"}]
        }
    }


class UpdateTaskRequest(ApiModel):
    """Request to update task fields (partial update)."""

    title: str | None = Field(None, description="New title")
    description: str | None = Field(None, description="New description")
    status: TaskStatus | None = Field(None, description="New status")

    model_config = {"json_schema_extra": {"examples": [{"status": "DONE"}]}}


class TaskPayload(ApiModel):
    task: TaskView


@router.get(
    "/tasks",
    summary="List tasks",
    description=(
        "Get the current user's tasks, newest first. Filter by `status` and by `search` "
        "(case-insensitive substring of the title). Descriptions that cannot be decrypted "
        'are returned as "[Decryption failed]".'
    ),
    operation_id="listTasks",
    responses={
        200: {"description": "Paginated list of tasks"},
        400: {"model": ErrorResponse, "description": "Invalid query parameters"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def list_tasks(
    app: AppDep,
    user_id: CurrentUserIdDep,
    page: Annotated[int, Query(ge=1, description="Page number, starting at 1")] = 1,
    limit: Annotated[int, Query(ge=1, le=PAGE_LIMIT_MAX, description="Maximum items per page")] = 10,
    status: Annotated[TaskStatus | None, Query(description="Only tasks with this status")] = None,
    search: Annotated[str | None, Query(description="Title substring to search for")] = None,
) -> ApiResponse[TaskPage]:
    return ApiResponse(data=await app.list_tasks(user_id, page, limit, status, search))


@router.post(
    "/tasks",
    summary="Create task",
    description="Create a new task owned by the current user.",
    operation_id="createTask",
    status_code=201,
    responses={
        201: {"description": "Task created successfully"},
        400: {"model": ErrorResponse, "description": "Invalid task data"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def create_task(request: CreateTaskRequest, app: AppDep, user_id: CurrentUserIdDep) -> ApiResponse[TaskPayload]:
    task = await app.create_task(user_id, request.title, request.description, request.status)
    return ApiResponse(message="Task created successfully", data=TaskPayload(task=task))


@router.get(
    "/tasks/{task_id}",
    summary="Get task",
    description="Get a single task. Only the owner can view it.",
    operation_id="getTask",
    responses={
        200: {"description": "Task details"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Task belongs to another user"},
        404: {"model": ErrorResponse, "description": "Task not found"},
    },
)
async def get_task(task_id: str, app: AppDep, user_id: CurrentUserIdDep) -> ApiResponse[TaskPayload]:
    return ApiResponse(data=TaskPayload(task=await app.get_task(user_id, task_id)))


@router.patch(
    "/tasks/{task_id}",
    summary="Update task",
    description="Partially update a task. Only the fields provided are changed. Only the owner can update it.",
    operation_id="updateTask",
    responses={
        200: {"description": "Task updated successfully"},
        400: {"model": ErrorResponse, "description": "Invalid task data"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Task belongs to another user"},
        404: {"model": ErrorResponse, "description": "Task not found"},
    },
)
async def update_task(
    task_id: str, request: UpdateTaskRequest, app: AppDep, user_id: CurrentUserIdDep
) -> ApiResponse[TaskPayload]:
    changes = TaskChanges(title=request.title, description=request.description, status=request.status)
    task = await app.update_task(user_id, task_id, changes)
    return ApiResponse(message="Task updated successfully", data=TaskPayload(task=task))


@router.delete(
    "/tasks/{task_id}",
    summary="Delete task",
    description="Delete a task. Only the owner can delete it.",
    operation_id="deleteTask",
    responses={
        200: {"description": "Task deleted successfully"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Task belongs to another user"},
        404: {"model": ErrorResponse, "description": "Task not found"},
    },
)
async def delete_task(task_id: str, app: AppDep, user_id: CurrentUserIdDep) -> MessageResponse:
    await app.delete_task(user_id, task_id)
    return MessageResponse(message="Task deleted successfully")
