"""Repository for interacting with task persistence models."""

from __future__ import annotations

from typing import Any
from uuid import UUID

import sqlalchemy as sa
from sqlalchemy import func
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..models import PRIORITY_RANK, Task, TaskPriority, TaskSortField, TaskStatus
from .base import BaseRepository

_PRIORITY_ORDER = sa.case(
    {priority.value: rank for priority, rank in PRIORITY_RANK.items()},
    value=col(Task.priority),
    else_=0,
)

_SORT_COLUMNS: dict[TaskSortField, Any] = {
    TaskSortField.CREATED_AT: col(Task.created_at),
    TaskSortField.UPDATED_AT: col(Task.updated_at),
    TaskSortField.DUE_DATE: col(Task.due_date),
    TaskSortField.PRIORITY: _PRIORITY_ORDER,
}


class TaskRepository(BaseRepository[Task]):
    """Concrete repository encapsulating ``Task`` persistence operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Task)

    @staticmethod
    def _filters(
        *,
        owner_id: UUID,
        status: TaskStatus | None,
        priority: TaskPriority | None,
        search: str | None,
    ) -> list[Any]:
        clauses: list[Any] = [col(Task.owner_id) == owner_id]
        if status is not None:
            clauses.append(col(Task.status) == status)
        if priority is not None:
            clauses.append(col(Task.priority) == priority)
        if search:
            clauses.append(
                sa.or_(
                    col(Task.title).icontains(search, autoescape=True),
                    col(Task.description).icontains(search, autoescape=True),
                )
            )
        return clauses

    async def list_filtered(
        self,
        *,
        owner_id: UUID,
        status: TaskStatus | None = None,
        priority: TaskPriority | None = None,
        search: str | None = None,
        sort_by: TaskSortField = TaskSortField.CREATED_AT,
        descending: bool = True,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[Task], int]:
        """Return one page of an owner's tasks plus the pre-pagination total."""
        clauses = self._filters(owner_id=owner_id, status=status, priority=priority, search=search)
        sort_column = _SORT_COLUMNS[sort_by]
        ordering = sort_column.desc() if descending else sort_column.asc()

        query = (
            select(Task)
            .where(*clauses)
            .order_by(ordering, col(Task.id))
            .limit(limit)
            .offset(offset)
        )
        count_query = select(func.count()).select_from(Task).where(*clauses)

        result = await self.session.execute(query)
        tasks = list(result.scalars().all())
        total_result = await self.session.execute(count_query)
        return tasks, int(total_result.scalar_one())

    async def count_by_status(self, *, owner_id: UUID) -> dict[TaskStatus, int]:
        """Return how many of an owner's tasks sit in each status."""
        query = (
            select(col(Task.status), func.count())
            .where(col(Task.owner_id) == owner_id)
            .group_by(col(Task.status))
        )
        result = await self.session.execute(query)
        return {TaskStatus(status): int(count) for status, count in result.all()}

    async def delete_for_owner(self, owner_id: UUID) -> int:
        """Bulk-delete every task belonging to ``owner_id``."""
        result = await self.session.execute(sa.delete(Task).where(col(Task.owner_id) == owner_id))
        return int(result.rowcount or 0)


__all__ = ["TaskRepository"]
