"""Content, feed and subscription schemas."""
from __future__ import annotations

import json
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from creator_stage.models.content import ContentType
from creator_stage.schemas.user import UserSummary


class ContentCreate(BaseModel):
    """Metadata submitted alongside an upload."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)
    type: ContentType
    tags: list[str] = Field(default_factory=list, max_length=20)

    @field_validator("tags", mode="before")
    @classmethod
    def parse_tags(cls, v: object) -> object:
        """Accept a JSON array or a comma separated string from multipart forms."""
        if v is None or v == "":
            return []
        if isinstance(v, str):
            text = v.strip()
            if text.startswith("["):
                try:
                    return json.loads(text)
                except json.JSONDecodeError as err:
                    raise ValueError("tags must be a JSON array of strings") from err
            return [part.strip() for part in text.split(",") if part.strip()]
        return v

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, v: list[str]) -> list[str]:
        seen: dict[str, None] = {}
        for tag in v:
            name = tag.strip().lstrip("#").lower()
            if name:
                seen.setdefault(name[:64], None)
        return list(seen)


class CreatorSummary(BaseModel):
    """Creator card on a feed item; every field is empty for orphaned content."""

    id: str | None = None
    username: str | None = None
    profile_image_url: str | None = None
    is_verified: bool = False


class ContentResponse(BaseModel):
    """Content as seen by its owner (drafts, create, publish)."""

    id: str
    title: str
    description: str | None
    type: ContentType
    media_url: str | None
    thumbnail_url: str | None
    tags: list[str]
    is_published: bool
    view_count: int
    like_count: int
    comments_count: int
    created_at: datetime
    updated_at: datetime


class FeedItem(BaseModel):
    """Published content joined with its creator and the viewer's state."""

    id: str
    title: str
    description: str | None
    type: ContentType
    media_url: str | None
    thumbnail_url: str | None
    tags: list[str]
    view_count: int
    like_count: int
    comments_count: int
    created_at: datetime
    creator: CreatorSummary
    is_liked: bool = False
    is_subscribed: bool = False
    is_blurred: bool = False


class DraftsResponse(BaseModel):
    videos: list[ContentResponse]
    images: list[ContentResponse]


class ContentStats(BaseModel):
    """Aggregate counters over everything a creator has uploaded."""

    total_content: int = 0
    video_count: int = 0
    image_count: int = 0
    total_likes: int = 0
    total_views: int = 0
    total_comments: int = 0


class SubscriptionResponse(BaseModel):
    id: str
    creator: UserSummary
    created_at: datetime
