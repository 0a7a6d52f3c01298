"""Models capturing likes and threaded comments."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from creator_stage.db.ids import new_id
from creator_stage.db.session import Base
from creator_stage.db.time import utcnow
from creator_stage.models.user import User


class Comment(Base):
    """Comment on a content item; replies point at their parent comment."""

    __tablename__ = "comment"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("user_account.id"), nullable=False, index=True
    )
    content_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("content.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Top-level comments have parent_id = NULL; a parent always shares content_id.
    parent_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("comment.id", ondelete="CASCADE"), nullable=True, index=True
    )
    like_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    user: Mapped[User] = relationship("User")
    replies: Mapped[list[Comment]] = relationship(
        "Comment",
        order_by="Comment.created_at",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


def like_target_key(*, content_id: str | None = None, comment_id: str | None = None) -> str:
    """Return the normalized target used by the per-user uniqueness constraint."""
    if content_id is not None:
        return f"content:{content_id}"
    return f"comment:{comment_id}"


class Like(Base):
    """A user's like on exactly one content item or comment."""

    __tablename__ = "likes"
    __table_args__ = (
        CheckConstraint(
            "(content_id IS NULL) != (comment_id IS NULL)",
            name="ck_like_single_target",
        ),
        # NULL-safe replacement for a unique index over (user, content, comment).
        UniqueConstraint("user_id", "target_key", name="uq_like_user_target"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("user_account.id"), nullable=False
    )
    content_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("content.id", ondelete="CASCADE"), nullable=True, index=True
    )
    comment_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("comment.id", ondelete="CASCADE"), nullable=True, index=True
    )
    target_key: Mapped[str] = mapped_column(String(80), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
