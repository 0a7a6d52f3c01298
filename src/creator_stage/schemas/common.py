"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class Pagination(BaseModel):
    """Offset pagination metadata returned by list endpoints."""

    total: int = Field(..., ge=0, description="Number of matching rows across all pages")
    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    has_next_page: bool = Field(..., description="True when total > skip + limit")

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> Pagination:
        skip = (page - 1) * limit
        return cls(total=total, page=page, limit=limit, has_next_page=total > skip + limit)


class Page(BaseModel, Generic[T]):
    """A single page of results."""

    items: list[T]
    pagination: Pagination


class StatusMessage(BaseModel):
    """Plain acknowledgement body."""

    message: str
