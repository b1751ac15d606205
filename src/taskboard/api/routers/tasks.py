"""Routes handling task CRUD operations."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, Response, status

from ...deps import CurrentUserDependency, DatabaseSessionDependency
from ...schemas import TaskCreate, TaskListParams, TaskListResponse, TaskRead, TaskStatistics, TaskUpdate
from ...services import TaskService

router = APIRouter(prefix="/tasks", tags=["tasks"])

TaskListQuery = Annotated[TaskListParams, Query()]


@router.post(
    "",
    response_model=TaskRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new task",
)
async def create_task(
    payload: TaskCreate,
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> TaskRead:
    task = await TaskService(session).create(payload, current_user)
    return TaskRead.model_validate(task)


@router.get(
    "",
    response_model=TaskListResponse,
    summary="List tasks with filtering, sorting and pagination",
)
async def list_tasks(
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
    params: TaskListQuery,
) -> TaskListResponse:
    return await TaskService(session).list(params.to_filter(), current_user)


@router.get(
    "/statistics",
    response_model=TaskStatistics,
    summary="Count the caller's tasks by status",
)
async def get_task_statistics(
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> TaskStatistics:
    return await TaskService(session).statistics(current_user)


@router.get("/{task_id}", response_model=TaskRead, summary="Retrieve a task by id")
async def get_task(
    task_id: UUID,
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> TaskRead:
    task = await TaskService(session).get(task_id, current_user)
    return TaskRead.model_validate(task)


@router.api_route(
    "/{task_id}",
    methods=["PATCH", "PUT"],
    response_model=TaskRead,
    summary="Update an existing task",
)
async def update_task(
    task_id: UUID,
    payload: TaskUpdate,
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> TaskRead:
    task = await TaskService(session).update(task_id, payload, current_user)
    return TaskRead.model_validate(task)


@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a task",
)
async def delete_task(
    task_id: UUID,
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> Response:
    await TaskService(session).remove(task_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
