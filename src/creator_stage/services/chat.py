"""Two-party conversations, message ordering and read state."""
from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from sqlalchemy import and_, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from creator_stage.db.time import as_utc, utcnow
from creator_stage.models import (
    Conversation,
    Message,
    NotificationType,
    User,
    conversation_participant,
    participant_key,
)
from creator_stage.realtime.bus import ChatEvent, EventBus
from creator_stage.schemas.chat import ConversationResponse, MessageResponse
from creator_stage.services.errors import NotFoundError, UnauthorizedError, ValidationError
from creator_stage.services.notifications import NotificationService
from creator_stage.services.storage import MediaStorage
from creator_stage.services.users import to_user_summary

logger = logging.getLogger(__name__)

MESSAGE_PREVIEW_LENGTH = 80


@dataclass
class ConversationSummary:
    """A conversation as listed for one participant."""

    conversation: Conversation
    other_participant: User | None
    last_message: Message | None

    @property
    def last_activity(self):
        if self.last_message is not None:
            return as_utc(self.last_message.created_at)
        return as_utc(self.conversation.created_at)


def serialize_message(message: Message) -> dict[str, Any]:
    return MessageResponse.model_validate(message).model_dump(mode="json")


def to_conversation_response(
    summary: ConversationSummary, storage: MediaStorage
) -> ConversationResponse:
    other = summary.other_participant
    last = summary.last_message
    return ConversationResponse(
        id=summary.conversation.id,
        created_at=summary.conversation.created_at,
        updated_at=summary.conversation.updated_at,
        other_participant=to_user_summary(other, storage) if other is not None else None,
        last_message=MessageResponse.model_validate(last) if last is not None else None,
    )


class ChatService:
    """Conversation lookup and creation, messaging and read receipts."""

    def __init__(
        self,
        db: Session,
        bus: EventBus[ChatEvent] | None = None,
        notifications: NotificationService | None = None,
    ) -> None:
        self.db = db
        self.bus = bus
        self.notifications = notifications or NotificationService(db)

    def start_conversation(self, user_id: str, other_user_id: str) -> Conversation:
        """Return the conversation between two users, creating it on first use.

        The unique participant key makes concurrent starts converge: a loser of
        the insert race rolls back its savepoint and returns the winner's row.

        Raises:
            ValidationError: If both ids name the same user.
            NotFoundError: If either user does not exist.
        """
        if user_id == other_user_id:
            raise ValidationError("Cannot start a conversation with yourself")

        key = participant_key(user_id, other_user_id)
        existing = self._find_conversation(key)
        if existing is not None:
            return existing

        user = self.db.get(User, user_id)
        other = self.db.get(User, other_user_id)
        if user is None or other is None:
            raise NotFoundError("User not found")

        conversation = Conversation(participant_key=key, participants=[user, other])
        try:
            with self.db.begin_nested():
                self.db.add(conversation)
        except IntegrityError:
            logger.info("Conversation %s created concurrently; reusing it", key)
            existing = self._find_conversation(key)
            if existing is None:
                raise
            return existing
        self.db.commit()
        logger.info("Started conversation %s", conversation.id)
        return conversation

    def _find_conversation(self, key: str) -> Conversation | None:
        return self.db.scalar(select(Conversation).where(Conversation.participant_key == key))

    def _get_for_participant(self, conversation_id: str, user_id: str) -> Conversation:
        conversation = self.db.get(Conversation, conversation_id)
        if conversation is None:
            raise NotFoundError("Conversation not found")
        if not conversation.has_participant(user_id):
            raise UnauthorizedError("Not a participant of this conversation")
        return conversation

    def send_message(self, sender_id: str, conversation_id: str, text: str) -> Message:
        """Store a message, relay it to the conversation room and notify the recipient.

        Args:
            sender_id: Author of the message.
            conversation_id: Target conversation.
            text: Message body.

        Returns:
            The persisted message.

        Raises:
            NotFoundError: If the conversation does not exist.
            UnauthorizedError: If the sender is not a participant.
        """
        conversation = self._get_for_participant(conversation_id, sender_id)

        message = Message(text=text, sender_id=sender_id, conversation_id=conversation.id)
        self.db.add(message)
        conversation.updated_at = utcnow()
        self.db.commit()

        if self.bus is not None:
            self.bus.publish(
                ChatEvent(
                    type="newMessage",
                    conversation_id=conversation.id,
                    data=serialize_message(message),
                )
            )

        recipient = conversation.other_participant(sender_id)
        if recipient is not None:
            sender = self.db.get(User, sender_id)
            sender_name = sender.username if sender is not None else "Someone"
            preview = text
            if len(preview) > MESSAGE_PREVIEW_LENGTH:
                preview = preview[:MESSAGE_PREVIEW_LENGTH] + "..."
            self.notifications.dispatch(
                recipient.id,
                NotificationType.MESSAGE,
                "New Message",
                f"{sender_name}: {preview}",
                {
                    "conversation_id": conversation.id,
                    "message_id": message.id,
                    "sender_id": sender_id,
                    "username": sender_name,
                },
                f"/chat/{conversation.id}",
            )
        return message

    def send_typing(self, user_id: str, conversation_id: str) -> None:
        conversation = self._get_for_participant(conversation_id, user_id)
        if self.bus is not None:
            self.bus.publish(
                ChatEvent(
                    type="typing",
                    conversation_id=conversation.id,
                    data={"conversation_id": conversation.id, "user_id": user_id},
                )
            )

    def get_conversations(self, user_id: str) -> list[ConversationSummary]:
        """List the user's conversations, most recently active first."""
        member_of = (
            select(conversation_participant.c.conversation_id)
            .where(conversation_participant.c.user_id == user_id)
        )
        conversations = self.db.scalars(
            select(Conversation).where(Conversation.id.in_(member_of))
        ).all()
        if not conversations:
            return []

        latest = (
            select(
                Message.conversation_id.label("conversation_id"),
                func.max(Message.created_at).label("last_at"),
            )
            .where(Message.conversation_id.in_(member_of))
            .group_by(Message.conversation_id)
            .subquery()
        )
        last_messages: dict[str, Message] = {}
        rows = self.db.scalars(
            select(Message)
            .join(
                latest,
                and_(
                    Message.conversation_id == latest.c.conversation_id,
                    Message.created_at == latest.c.last_at,
                ),
            )
            .order_by(Message.conversation_id, Message.id)
        )
        for message in rows:
            # Ties on created_at: keep the first row seen.
            last_messages.setdefault(message.conversation_id, message)

        summaries = [
            ConversationSummary(
                conversation=conversation,
                other_participant=conversation.other_participant(user_id),
                last_message=last_messages.get(conversation.id),
            )
            for conversation in conversations
        ]
        summaries.sort(key=lambda summary: summary.last_activity, reverse=True)
        return summaries

    def get_messages(self, conversation_id: str, viewer_id: str) -> Sequence[Message]:
        """Mark the other party's unread messages as read, then list all messages.

        The read flag flips in one conditional UPDATE, so concurrent readers see
        each row either before or after the change and no update is lost.
        """
        conversation = self._get_for_participant(conversation_id, viewer_id)
        result = self.db.execute(
            update(Message)
            .where(
                Message.conversation_id == conversation.id,
                Message.sender_id != viewer_id,
                Message.is_read.is_(False),
            )
            .values(is_read=True)
            .execution_options(synchronize_session="fetch")
        )
        self.db.commit()
        logger.debug("Marked %s message(s) read in %s", result.rowcount, conversation.id)
        return self.db.scalars(
            select(Message)
            .where(Message.conversation_id == conversation.id)
            .order_by(Message.created_at, Message.id)
        ).all()
