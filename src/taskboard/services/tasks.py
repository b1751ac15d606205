"""Service layer encapsulating task-related operations."""

from __future__ import annotations

import logging
from uuid import UUID

from sqlmodel.ext.asyncio.session import AsyncSession

from ..core.cache import (
    TASK_LIST_CACHE_NAMESPACE,
    TASK_STATISTICS_CACHE_NAMESPACE,
    cache_get_or_set,
    invalidate_task_cache,
)
from ..errors import ForbiddenError, NotFoundError
from ..models import Task, TaskStatus, User
from ..repositories import TaskRepository
from ..schemas import PageMeta, TaskCreate, TaskFilter, TaskListResponse, TaskRead, TaskStatistics, TaskUpdate
from .users import is_admin

logger = logging.getLogger(__name__)


class TaskService:
    """High-level business orchestration for ``Task`` entities.

    Reads of listings and statistics go through the response cache. Every write
    clears both cached namespaces for all owners.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._repository = TaskRepository(session)

    async def _invalidate_cache(self) -> None:
        await invalidate_task_cache()

    async def create(self, payload: TaskCreate, owner: User) -> Task:
        """Create a new task belonging to ``owner``."""
        task = Task(**payload.model_dump(), owner_id=owner.id)
        await self._repository.add(task)
        await self._session.commit()
        await self._repository.refresh(task)
        await self._invalidate_cache()
        logger.info("Created task", extra={"task_id": str(task.id), "owner_id": str(owner.id)})
        return task

    async def list(self, criteria: TaskFilter, owner: User) -> TaskListResponse:
        """Return one page of the owner's tasks matching ``criteria``."""

        async def _build() -> TaskListResponse:
            tasks, total = await self._repository.list_filtered(
                owner_id=owner.id,
                status=criteria.status,
                priority=criteria.priority,
                search=criteria.search,
                sort_by=criteria.sort_by,
                descending=criteria.descending,
                limit=criteria.limit,
                offset=criteria.offset,
            )
            return TaskListResponse(
                data=[TaskRead.model_validate(task) for task in tasks],
                meta=PageMeta.build(total=total, page=criteria.page, limit=criteria.limit),
            )

        return await cache_get_or_set(
            namespace=TASK_LIST_CACHE_NAMESPACE,
            key=f"owner={owner.id}:{criteria.cache_fragment()}",
            builder=_build,
            model=TaskListResponse,
        )

    async def get(self, task_id: UUID, caller: User) -> Task:
        """Fetch a task the caller may see: their own, or any task for an admin."""
        task = await self._repository.get(task_id)
        if task is None:
            raise NotFoundError(f"Task with ID {task_id} not found")
        if task.owner_id != caller.id and not is_admin(caller):
            raise ForbiddenError("You do not have access to this task")
        return task

    async def update(self, task_id: UUID, patch: TaskUpdate, caller: User) -> Task:
        """Apply only the fields present in ``patch``."""
        task = await self.get(task_id, caller)
        for field_name, value in patch.changes().items():
            setattr(task, field_name, value)
        self._session.add(task)
        await self._session.commit()
        await self._repository.refresh(task)
        await self._invalidate_cache()
        return task

    async def remove(self, task_id: UUID, caller: User) -> None:
        task = await self.get(task_id, caller)
        await self._repository.delete(task)
        await self._session.commit()
        await self._invalidate_cache()

    async def statistics(self, caller: User) -> TaskStatistics:
        """Count the caller's tasks per status, with every status present."""

        async def _build() -> TaskStatistics:
            counts = await self._repository.count_by_status(owner_id=caller.id)
            by_status = {status.value: counts.get(status, 0) for status in TaskStatus}
            return TaskStatistics(total=sum(by_status.values()), by_status=by_status)

        return await cache_get_or_set(
            namespace=TASK_STATISTICS_CACHE_NAMESPACE,
            key=f"owner={caller.id}",
            builder=_build,
            model=TaskStatistics,
        )


__all__ = ["TaskService"]
