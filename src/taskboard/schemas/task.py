"""Task-related Pydantic schemas."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from pydantic import ConfigDict, Field, field_validator, model_validator

from ..models import SortOrder, TaskPriority, TaskSortField, TaskStatus
from .common import CamelModel, PageMeta, PageParams, RequestModel

TASK_READ_EXAMPLE = {
    "id": "3f0c7a52-9d7e-4c55-8d8f-0b8f8c1d2e11",
    "title": "Draft quarterly report",
    "description": "Collect numbers from the finance dashboard.",
    "status": TaskStatus.IN_PROGRESS.value,
    "priority": TaskPriority.HIGH.value,
    "dueDate": "2024-07-01T09:00:00Z",
    "ownerId": "b6a4b1c2-5d1e-4a43-9a57-3c3f0c9d2f77",
    "createdAt": "2024-06-01T12:00:00Z",
    "updatedAt": "2024-06-02T08:30:00Z",
}


class TaskCreate(RequestModel):
    """Payload for creating a new task."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Draft quarterly report",
                "description": "Collect numbers from the finance dashboard.",
                "priority": TaskPriority.HIGH.value,
                "dueDate": "2024-07-01T09:00:00Z",
            }
        }
    )

    title: str = Field(min_length=3, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    status: TaskStatus = Field(default=TaskStatus.TODO)
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM)
    due_date: datetime | None = Field(default=None)


class TaskUpdate(RequestModel):
    """Payload for partially updating an existing task.

    Only fields present in the request are applied. ``description`` and
    ``dueDate`` may be sent as ``null`` to clear them.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": TaskStatus.DONE.value,
                "dueDate": None,
            }
        }
    )

    title: str | None = Field(default=None, min_length=3, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    status: TaskStatus | None = Field(default=None)
    priority: TaskPriority | None = Field(default=None)
    due_date: datetime | None = Field(default=None)

    @field_validator("title", "status", "priority")
    @classmethod
    def _reject_null(cls, value: object) -> object:
        if value is None:
            raise ValueError("Field cannot be null.")
        return value

    @model_validator(mode="after")
    def _ensure_payload_not_empty(self) -> "TaskUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update.")
        return self

    def changes(self) -> dict[str, object]:
        """Return the explicitly provided fields keyed by model attribute name."""
        return self.model_dump(exclude_unset=True)


class TaskRead(CamelModel):
    """Public representation of a task."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={"example": TASK_READ_EXAMPLE},
    )

    id: UUID
    title: str
    description: str | None = None
    status: TaskStatus
    priority: TaskPriority
    due_date: datetime | None = None
    owner_id: UUID
    created_at: datetime
    updated_at: datetime


class TaskListResponse(CamelModel):
    """One page of tasks with its pagination metadata."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "data": [TASK_READ_EXAMPLE],
                "meta": {
                    "total": 1,
                    "page": 1,
                    "limit": 10,
                    "totalPages": 1,
                    "hasNextPage": False,
                    "hasPreviousPage": False,
                },
            }
        }
    )

    data: list[TaskRead]
    meta: PageMeta


class TaskStatistics(CamelModel):
    """Count of the caller's tasks, in total and per status."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "total": 3,
                "byStatus": {
                    TaskStatus.TODO.value: 1,
                    TaskStatus.IN_PROGRESS.value: 1,
                    TaskStatus.DONE.value: 1,
                },
            }
        }
    )

    total: int = Field(ge=0)
    by_status: dict[str, int] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _validate_counts(self) -> "TaskStatistics":
        if any(count < 0 for count in self.by_status.values()):
            raise ValueError("Status counts cannot be negative.")
        return self


@dataclass(frozen=True, slots=True)
class TaskFilter:
    """Criteria for one task listing request."""

    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    search: str | None = None
    page: int = 1
    limit: int = 10
    sort_by: TaskSortField = TaskSortField.CREATED_AT
    sort_order: SortOrder = SortOrder.DESC

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def descending(self) -> bool:
        return self.sort_order is SortOrder.DESC

    def cache_fragment(self) -> str:
        """Render the criteria as a stable string usable inside a cache key."""
        parts = (
            ("status", self.status.value if self.status else ""),
            ("priority", self.priority.value if self.priority else ""),
            ("search", self.search or ""),
            ("page", str(self.page)),
            ("limit", str(self.limit)),
            ("sortBy", self.sort_by.value),
            ("sortOrder", self.sort_order.value),
        )
        return "&".join(f"{name}={value}" for name, value in parts)


class TaskListParams(PageParams):
    """Query string accepted by the task listing. Unknown parameters are rejected."""

    status: TaskStatus | None = Field(default=None, description="Only tasks with this status.")
    priority: TaskPriority | None = Field(default=None, description="Only tasks with this priority.")
    search: str | None = Field(
        default=None,
        max_length=200,
        description="Case-insensitive match against title or description.",
    )
    sort_by: TaskSortField = Field(default=TaskSortField.CREATED_AT, description="Field to order by.")
    sort_order: SortOrder = Field(default=SortOrder.DESC, description="Sort direction.")

    def to_filter(self) -> TaskFilter:
        return TaskFilter(
            status=self.status,
            priority=self.priority,
            search=self.search or None,
            page=self.page,
            limit=self.limit,
            sort_by=self.sort_by,
            sort_order=self.sort_order,
        )


__all__ = [
    "TaskCreate",
    "TaskFilter",
    "TaskListParams",
    "TaskListResponse",
    "TaskRead",
    "TaskStatistics",
    "TaskUpdate",
]
