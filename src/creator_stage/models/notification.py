"""Models for persisted user notifications and delivery preferences."""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Enum, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from creator_stage.db.ids import new_id
from creator_stage.db.session import Base
from creator_stage.db.time import utcnow


class NotificationType(str, enum.Enum):
    """Categories of user-facing events."""

    LIKE = "like"
    COMMENT = "comment"
    MESSAGE = "message"
    FOLLOW = "follow"
    MENTION = "mention"


class Notification(Base):
    """Notification addressed to a single recipient."""

    __tablename__ = "notification"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    type: Mapped[NotificationType] = mapped_column(
        Enum(
            NotificationType,
            name="notification_type",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    data: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    # Client deep link, e.g. /chat/<conversation id>.
    route: Mapped[str] = mapped_column(Text, nullable=False, default="")
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("user_account.id"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, index=True
    )


class NotificationPreference(Base):
    """Per-user switches for each notification category; absent row = all on."""

    __tablename__ = "notification_preference"

    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("user_account.id", ondelete="CASCADE"), primary_key=True
    )
    likes: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    comments: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    mentions: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    messages: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    follows: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def allows(self, notification_type: NotificationType) -> bool:
        """Return whether the recipient accepts notifications of this type."""
        return bool(getattr(self, PREFERENCE_FIELDS[notification_type]))


PREFERENCE_FIELDS: dict[NotificationType, str] = {
    NotificationType.LIKE: "likes",
    NotificationType.COMMENT: "comments",
    NotificationType.MENTION: "mentions",
    NotificationType.MESSAGE: "messages",
    NotificationType.FOLLOW: "follows",
}
