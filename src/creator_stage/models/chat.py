"""Models describing two-party conversations and their messages."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from creator_stage.db.ids import new_id
from creator_stage.db.session import Base
from creator_stage.db.time import utcnow
from creator_stage.models.user import User

conversation_participant = Table(
    "conversation_participant",
    Base.metadata,
    Column(
        "conversation_id",
        String(36),
        ForeignKey("conversation.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("user_id", String(36), ForeignKey("user_account.id"), primary_key=True, index=True),
)


def participant_key(user_a: str, user_b: str) -> str:
    """Return the order-independent key identifying a pair of participants."""
    first, second = sorted((user_a, user_b))
    return f"{first}:{second}"


class Conversation(Base):
    """Direct conversation between exactly two users."""

    __tablename__ = "conversation"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    # Unique sorted pair; the store-level guard against duplicate conversations.
    participant_key: Mapped[str] = mapped_column(String(80), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    participants: Mapped[list[User]] = relationship(
        "User",
        secondary=conversation_participant,
        lazy="selectin",
    )

    def other_participant(self, user_id: str) -> User | None:
        """Return the participant that is not ``user_id``, if any."""
        for participant in self.participants:
            if participant.id != user_id:
                return participant
        return None

    def has_participant(self, user_id: str) -> bool:
        return any(participant.id == user_id for participant in self.participants)


class Message(Base):
    """A chat message. Immutable after creation except for ``is_read``."""

    __tablename__ = "message"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    sender_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("user_account.id"), nullable=False
    )
    conversation_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("conversation.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, index=True
    )

    sender: Mapped[User] = relationship("User")
