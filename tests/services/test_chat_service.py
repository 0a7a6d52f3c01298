"""Tests for ChatService: conversation reuse, ordering and read receipts."""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import func, select

from creator_stage.models import Conversation, Message, Notification, NotificationType
from creator_stage.realtime import ChatEvent, EventBus
from creator_stage.services import ChatService
from creator_stage.services.errors import NotFoundError, UnauthorizedError, ValidationError

BASE_TIME = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def chat_bus():
    return EventBus[ChatEvent]("chat")


@pytest.fixture
def chat(db_session, chat_bus):
    return ChatService(db_session, chat_bus)


def test_start_conversation_reuses_existing_pair(chat, test_user, other_user, db_session) -> None:
    first = chat.start_conversation(test_user.id, other_user.id)
    second = chat.start_conversation(other_user.id, test_user.id)

    assert first.id == second.id
    assert db_session.scalar(select(func.count()).select_from(Conversation)) == 1
    assert {p.id for p in first.participants} == {test_user.id, other_user.id}


def test_start_conversation_rejects_self_and_unknown_user(chat, test_user) -> None:
    with pytest.raises(ValidationError):
        chat.start_conversation(test_user.id, test_user.id)
    with pytest.raises(NotFoundError):
        chat.start_conversation(test_user.id, "missing-user")


def test_start_conversation_converges_when_insert_races(
    chat, test_user, other_user, db_session, mocker
) -> None:
    winner = chat.start_conversation(test_user.id, other_user.id)
    winner_id = winner.id

    # The loser's pre-check misses the winner's row, so it hits the unique key.
    original = ChatService._find_conversation
    missed = []

    def find_after_first_miss(self, key):
        if not missed:
            missed.append(key)
            return None
        return original(self, key)

    mocker.patch.object(
        ChatService, "_find_conversation", autospec=True, side_effect=find_after_first_miss
    )

    result = chat.start_conversation(other_user.id, test_user.id)

    assert result.id == winner_id
    assert db_session.scalar(select(func.count()).select_from(Conversation)) == 1


def test_conversations_are_ordered_by_latest_message(
    chat, make_user, test_user, other_user, db_session
) -> None:
    carol = make_user("carol")
    with_bob = chat.start_conversation(test_user.id, other_user.id)
    with_carol = chat.start_conversation(test_user.id, carol.id)

    db_session.add_all(
        [
            Message(
                text="old",
                sender_id=other_user.id,
                conversation_id=with_bob.id,
                created_at=BASE_TIME + timedelta(seconds=5),
            ),
            Message(
                text="new",
                sender_id=carol.id,
                conversation_id=with_carol.id,
                created_at=BASE_TIME + timedelta(seconds=10),
            ),
        ]
    )
    db_session.commit()

    summaries = chat.get_conversations(test_user.id)

    assert [s.conversation.id for s in summaries] == [with_carol.id, with_bob.id]
    assert summaries[0].last_message.text == "new"
    assert summaries[0].other_participant.id == carol.id
    assert summaries[1].last_message.text == "old"


def test_conversations_without_messages_are_listed(chat, test_user, other_user) -> None:
    conversation = chat.start_conversation(test_user.id, other_user.id)

    summaries = chat.get_conversations(test_user.id)

    assert len(summaries) == 1
    assert summaries[0].conversation.id == conversation.id
    assert summaries[0].last_message is None
    assert chat.get_conversations("nobody") == []


def test_send_message_publishes_and_notifies(chat, chat_bus, test_user, other_user, db_session) -> None:
    received: list[ChatEvent] = []
    chat_bus.subscribe(received.append)
    conversation = chat.start_conversation(test_user.id, other_user.id)

    message = chat.send_message(test_user.id, conversation.id, "hello bob")

    assert len(received) == 1
    assert received[0].type == "newMessage"
    assert received[0].conversation_id == conversation.id
    assert received[0].data["id"] == message.id
    assert received[0].data["text"] == "hello bob"

    notification = db_session.scalar(select(Notification))
    assert notification.user_id == other_user.id
    assert notification.type is NotificationType.MESSAGE
    assert notification.title == "New Message"
    assert notification.message == "alice: hello bob"
    assert notification.route == f"/chat/{conversation.id}"
    assert notification.data["conversation_id"] == conversation.id


def test_send_message_requires_participation(chat, make_user, test_user, other_user) -> None:
    outsider = make_user("mallory")
    conversation = chat.start_conversation(test_user.id, other_user.id)

    with pytest.raises(UnauthorizedError):
        chat.send_message(outsider.id, conversation.id, "let me in")
    with pytest.raises(NotFoundError):
        chat.send_message(test_user.id, "missing", "hello?")


def test_long_message_preview_is_truncated(chat, test_user, other_user, db_session) -> None:
    conversation = chat.start_conversation(test_user.id, other_user.id)

    chat.send_message(test_user.id, conversation.id, "x" * 200)

    notification = db_session.scalar(select(Notification))
    assert notification.message == "alice: " + "x" * 80 + "..."


def test_get_messages_marks_only_incoming_as_read(chat, test_user, other_user, db_session) -> None:
    conversation = chat.start_conversation(test_user.id, other_user.id)
    db_session.add_all(
        [
            Message(
                text="from bob",
                sender_id=other_user.id,
                conversation_id=conversation.id,
                created_at=BASE_TIME,
            ),
            Message(
                text="from alice",
                sender_id=test_user.id,
                conversation_id=conversation.id,
                created_at=BASE_TIME + timedelta(seconds=1),
            ),
        ]
    )
    db_session.commit()

    messages = chat.get_messages(conversation.id, test_user.id)

    assert [m.text for m in messages] == ["from bob", "from alice"]
    read_state = {m.text: m.is_read for m in messages}
    assert read_state == {"from bob": True, "from alice": False}


def test_send_typing_publishes_snake_case_payload(chat, chat_bus, test_user, other_user) -> None:
    received: list[ChatEvent] = []
    chat_bus.subscribe(received.append)
    conversation = chat.start_conversation(test_user.id, other_user.id)

    chat.send_typing(test_user.id, conversation.id)

    assert received == [
        ChatEvent(
            type="typing",
            conversation_id=conversation.id,
            data={"conversation_id": conversation.id, "user_id": test_user.id},
        )
    ]
