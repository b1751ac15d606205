"""Pydantic schemas for public interfaces."""

from __future__ import annotations

from .auth import AuthResponse, LoginRequest, RegisterRequest
from .common import MAX_PAGE, MAX_PAGE_SIZE, CamelModel, PageMeta, PageParams, RequestModel
from .system import ErrorResponse, HealthCheckResponse, RootResponse
from .task import (
    TaskCreate,
    TaskFilter,
    TaskListParams,
    TaskListResponse,
    TaskRead,
    TaskStatistics,
    TaskUpdate,
)
from .user import UserListResponse, UserPublic, UserUpdate

__all__ = [
    "AuthResponse",
    "CamelModel",
    "ErrorResponse",
    "HealthCheckResponse",
    "LoginRequest",
    "MAX_PAGE",
    "MAX_PAGE_SIZE",
    "PageMeta",
    "PageParams",
    "RegisterRequest",
    "RequestModel",
    "RootResponse",
    "TaskCreate",
    "TaskFilter",
    "TaskListParams",
    "TaskListResponse",
    "TaskRead",
    "TaskStatistics",
    "TaskUpdate",
    "UserListResponse",
    "UserPublic",
    "UserUpdate",
]
