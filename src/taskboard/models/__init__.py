"""Domain models for users and their tasks."""

from __future__ import annotations

from .common import TimestampMixin, utcnow
from .task import (
    PRIORITY_RANK,
    SortOrder,
    Task,
    TaskBase,
    TaskPriority,
    TaskSortField,
    TaskStatus,
)
from .user import User, UserBase, UserRole

__all__ = [
    "PRIORITY_RANK",
    "SortOrder",
    "Task",
    "TaskBase",
    "TaskPriority",
    "TaskSortField",
    "TaskStatus",
    "TimestampMixin",
    "User",
    "UserBase",
    "UserRole",
    "utcnow",
]
