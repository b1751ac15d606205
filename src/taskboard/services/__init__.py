"""Service layer exports."""

from __future__ import annotations

from .auth import AuthService
from .tasks import TaskService
from .users import UserService, is_admin

__all__ = ["AuthService", "TaskService", "UserService", "is_admin"]
