"""Likes and comments."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from creator_stage.schemas.user import UserSummary


class CommentCreate(BaseModel):
    """Schema for posting a comment or a reply."""

    text: str = Field(..., min_length=1, max_length=2000)
    parent_id: str | None = Field(None, description="Comment being replied to")


class CommentResponse(BaseModel):
    id: str
    text: str
    content_id: str
    parent_id: str | None
    like_count: int
    created_at: datetime
    user: UserSummary | None
    is_liked: bool = False
    replies: list[CommentResponse] = Field(default_factory=list)


class LikeResponse(BaseModel):
    """State of a like after a toggle."""

    is_liked: bool
    like_count: int
