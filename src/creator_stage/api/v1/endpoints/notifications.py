# src/creator_stage/api/v1/endpoints/notifications.py
"""Notification endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query

from creator_stage.schemas.common import StatusMessage
from creator_stage.schemas.notification import (
    NotificationPage,
    NotificationSettings,
    NotificationSettingsUpdate,
    UnreadCount,
)

from ..dependencies import CurrentUserDep, NotificationServiceDep, PageQuery

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationPage)
async def list_notifications(
    current_user: CurrentUserDep,
    service: NotificationServiceDep,
    page: PageQuery = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
) -> NotificationPage:
    """Return the caller's notifications, newest first."""
    return service.get_notifications(current_user.id, page, limit)


@router.get("/count", response_model=UnreadCount)
async def unread_count(current_user: CurrentUserDep, service: NotificationServiceDep) -> UnreadCount:
    return UnreadCount(count=service.get_unread_count(current_user.id))


@router.get("/settings", response_model=NotificationSettings)
async def get_settings(
    current_user: CurrentUserDep, service: NotificationServiceDep
) -> NotificationSettings:
    return service.get_settings(current_user.id)


@router.post("/settings", response_model=NotificationSettings)
async def update_settings(
    payload: NotificationSettingsUpdate,
    current_user: CurrentUserDep,
    service: NotificationServiceDep,
) -> NotificationSettings:
    return service.update_settings(current_user.id, payload)


@router.post("/read-all", response_model=StatusMessage)
async def mark_all_read(current_user: CurrentUserDep, service: NotificationServiceDep) -> StatusMessage:
    service.mark_all_as_read(current_user.id)
    return StatusMessage(message="All notifications marked as read")


@router.post("/{notification_id}/read", response_model=StatusMessage)
async def mark_read(
    notification_id: str, current_user: CurrentUserDep, service: NotificationServiceDep
) -> StatusMessage:
    service.mark_as_read(current_user.id, notification_id)
    return StatusMessage(message="Notification marked as read")


@router.delete("/{notification_id}", response_model=StatusMessage)
async def delete_notification(
    notification_id: str, current_user: CurrentUserDep, service: NotificationServiceDep
) -> StatusMessage:
    service.delete_notification(current_user.id, notification_id)
    return StatusMessage(message="Notification deleted")
