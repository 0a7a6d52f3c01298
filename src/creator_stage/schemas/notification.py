"""Notification schemas."""
from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from creator_stage.models.notification import NotificationType


class NotificationResponse(BaseModel):
    id: str
    type: NotificationType
    title: str
    message: str
    data: dict[str, Any] | None = None
    route: str
    is_read: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class NotificationPagination(BaseModel):
    total: int
    page: int
    limit: int
    has_more: bool


class NotificationPage(BaseModel):
    notifications: list[NotificationResponse]
    pagination: NotificationPagination


class UnreadCount(BaseModel):
    count: int


class NotificationSettings(BaseModel):
    """Per-category switches; all categories are enabled by default."""

    likes: bool = True
    comments: bool = True
    mentions: bool = True
    messages: bool = True
    follows: bool = True

    model_config = ConfigDict(from_attributes=True)


class NotificationSettingsUpdate(BaseModel):
    likes: bool | None = None
    comments: bool | None = None
    mentions: bool | None = None
    messages: bool | None = None
    follows: bool | None = None
