"""SQLAlchemy models for published media and its tags."""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import Mapped, mapped_column, relationship

from creator_stage.db.ids import new_id
from creator_stage.db.session import Base
from creator_stage.db.time import utcnow
from creator_stage.models.user import User


class ContentType(str, enum.Enum):
    """Kinds of media a creator can upload."""

    VIDEO = "video"
    IMAGE = "image"


class Content(Base):
    """A creator's image or video post.

    Content is created as a draft and becomes visible in feeds once published.
    ``view_count``, ``like_count`` and ``comments_count`` are denormalized
    counters maintained by the services alongside the underlying rows.
    """

    __tablename__ = "content"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[ContentType] = mapped_column(
        Enum(ContentType, name="content_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )

    # Relative paths under the upload root; never exposed directly to clients.
    media_path: Mapped[str] = mapped_column(Text, nullable=False)
    thumbnail_path: Mapped[str | None] = mapped_column(Text, nullable=True)

    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    like_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    comments_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    creator_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("user_account.id"), nullable=True, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    creator: Mapped[User | None] = relationship("User")
    tags: Mapped[list[ContentTag]] = relationship(
        "ContentTag",
        order_by="ContentTag.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def tag_names(self) -> list[str]:
        """Return the tags in their original order."""
        return [tag.name for tag in self.tags]

    @tag_names.setter
    def tag_names(self, names: list[str]) -> None:
        self.tags = [ContentTag(name=name) for name in names]


class ContentTag(Base):
    """One tag of a content item; ``position`` preserves the submitted order."""

    __tablename__ = "content_tag"

    content_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("content.id", ondelete="CASCADE"), primary_key=True
    )
    position: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
