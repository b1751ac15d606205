"""Shared schema plumbing: camelCase wire format and pagination metadata."""

from __future__ import annotations

import math

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for response payloads serialised with camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RequestModel(CamelModel):
    """Base for request bodies and query strings: unknown fields rejected, strings trimmed."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


# Keeps `(page - 1) * limit` inside a signed 64-bit integer for every allowed limit.
MAX_PAGE = 10**15
MAX_PAGE_SIZE = 100


class PageParams(RequestModel):
    """Query parameters shared by paginated listings."""

    page: int = Field(default=1, ge=1, le=MAX_PAGE, description="1-based page number.")
    limit: int = Field(default=10, ge=1, le=MAX_PAGE_SIZE, description="Page size.")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class PageMeta(CamelModel):
    """Pagination metadata attached to every listing."""

    total: int = Field(ge=0)
    page: int = Field(ge=1)
    limit: int = Field(ge=1)
    total_pages: int = Field(ge=0)
    has_next_page: bool
    has_previous_page: bool

    @classmethod
    def build(cls, *, total: int, page: int, limit: int) -> "PageMeta":
        total_pages = math.ceil(total / limit) if total else 0
        return cls(
            total=total,
            page=page,
            limit=limit,
            total_pages=total_pages,
            has_next_page=page < total_pages,
            has_previous_page=page > 1,
        )


__all__ = ["MAX_PAGE", "MAX_PAGE_SIZE", "CamelModel", "PageMeta", "PageParams", "RequestModel"]
