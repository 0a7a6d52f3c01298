"""Persisted notifications and their realtime publication."""
from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from creator_stage.models import Notification, NotificationPreference, NotificationType
from creator_stage.realtime.bus import EventBus, NotificationCreated
from creator_stage.schemas.notification import (
    NotificationPage,
    NotificationPagination,
    NotificationResponse,
    NotificationSettings,
    NotificationSettingsUpdate,
)
from creator_stage.services.errors import NotFoundError

logger = logging.getLogger(__name__)


def serialize_notification(notification: Notification) -> dict[str, Any]:
    """JSON-ready payload pushed to sockets and returned by the API."""
    return NotificationResponse.model_validate(notification).model_dump(mode="json")


class NotificationService:
    """Creates, lists and updates a user's notifications.

    Other services call :meth:`dispatch` after committing their own change, so
    a failing notification write can never undo the action that caused it.
    """

    def __init__(self, db: Session, bus: EventBus[NotificationCreated] | None = None) -> None:
        self.db = db
        self.bus = bus

    def create_notification(
        self,
        recipient_id: str,
        type: NotificationType,
        title: str,
        message: str,
        data: dict[str, Any] | None = None,
        route: str = "",
    ) -> Notification | None:
        """Persist a notification and publish it to the recipient's connections.

        Args:
            recipient_id: User receiving the notification.
            type: Notification category.
            title: Short heading.
            message: Human readable body.
            data: Free-form payload for the client.
            route: Client deep link.

        Returns:
            The stored notification, or None when the recipient muted this category.
        """
        notification = self._store(recipient_id, type, title, message, data, route)
        if notification is None:
            return None
        self.db.commit()
        self._publish(notification)
        return notification

    def dispatch(
        self,
        recipient_id: str,
        type: NotificationType,
        title: str,
        message: str,
        data: dict[str, Any] | None = None,
        route: str = "",
    ) -> Notification | None:
        """Fire-and-forget variant of :meth:`create_notification`.

        The write happens inside a savepoint; a database failure rolls back
        only that savepoint, is logged with its traceback, and yields None.
        """
        try:
            with self.db.begin_nested():
                notification = self._store(recipient_id, type, title, message, data, route)
        except SQLAlchemyError:
            logger.exception(
                "Failed to store %s notification for user %s", type.value, recipient_id
            )
            return None
        self.db.commit()
        if notification is not None:
            self._publish(notification)
        return notification

    def _store(
        self,
        recipient_id: str,
        type: NotificationType,
        title: str,
        message: str,
        data: dict[str, Any] | None,
        route: str,
    ) -> Notification | None:
        preference = self.db.get(NotificationPreference, recipient_id)
        if preference is not None and not preference.allows(type):
            logger.debug("User %s muted %s notifications", recipient_id, type.value)
            return None
        notification = Notification(
            user_id=recipient_id,
            type=type,
            title=title,
            message=message,
            data=data,
            route=route,
        )
        self.db.add(notification)
        self.db.flush()
        return notification

    def _publish(self, notification: Notification) -> None:
        if self.bus is None:
            return
        self.bus.publish(
            NotificationCreated(
                user_id=notification.user_id,
                notification=serialize_notification(notification),
            )
        )

    # -- recipient operations -------------------------------------------------
    def get_notifications(self, user_id: str, page: int = 1, limit: int = 20) -> NotificationPage:
        skip = (page - 1) * limit
        total = self.db.scalar(
            select(func.count()).select_from(Notification).where(Notification.user_id == user_id)
        ) or 0
        rows = self.db.scalars(
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id)
            .offset(skip)
            .limit(limit)
        ).all()
        return NotificationPage(
            notifications=[NotificationResponse.model_validate(row) for row in rows],
            pagination=NotificationPagination(
                total=total, page=page, limit=limit, has_more=total > skip + limit
            ),
        )

    def get_unread_notifications(self, user_id: str) -> Sequence[Notification]:
        return self.db.scalars(
            select(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .order_by(Notification.created_at.desc())
        ).all()

    def get_unread_count(self, user_id: str) -> int:
        return self.db.scalar(
            select(func.count())
            .select_from(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
        ) or 0

    def mark_as_read(self, user_id: str, notification_id: str) -> None:
        # No match (foreign or already read) is a successful no-op.
        self.db.execute(
            update(Notification)
            .where(
                Notification.id == notification_id,
                Notification.user_id == user_id,
                Notification.is_read.is_(False),
            )
            .values(is_read=True)
        )
        self.db.commit()

    def mark_all_as_read(self, user_id: str) -> int:
        result = self.db.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True)
        )
        self.db.commit()
        return result.rowcount or 0

    def delete_notification(self, user_id: str, notification_id: str) -> None:
        result = self.db.execute(
            delete(Notification).where(
                Notification.id == notification_id, Notification.user_id == user_id
            )
        )
        if not result.rowcount:
            self.db.rollback()
            raise NotFoundError("Notification not found")
        self.db.commit()

    # -- preferences ----------------------------------------------------------
    def get_settings(self, user_id: str) -> NotificationSettings:
        preference = self.db.get(NotificationPreference, user_id)
        if preference is None:
            return NotificationSettings()
        return NotificationSettings.model_validate(preference)

    def update_settings(
        self, user_id: str, changes: NotificationSettingsUpdate
    ) -> NotificationSettings:
        preference = self.db.get(NotificationPreference, user_id)
        if preference is None:
            preference = NotificationPreference(
                user_id=user_id,
                likes=True,
                comments=True,
                mentions=True,
                messages=True,
                follows=True,
            )
            self.db.add(preference)
        for field, value in changes.model_dump(exclude_none=True).items():
            setattr(preference, field, value)
        self.db.commit()
        return NotificationSettings.model_validate(preference)
