"""Tests for direct messages over HTTP and the chat socket."""

from contextlib import contextmanager

from fastapi import status

from creator_stage.api.v1.dependencies import get_session_factory
from creator_stage.core.security import create_access_token


def _start(client, headers, other_id) -> str:
    response = client.post(f"/api/v1/chat/start/{other_id}", headers=headers)
    assert response.status_code == status.HTTP_200_OK
    return response.json()["id"]


def test_start_conversation_is_reused(
    client, test_user, other_user, auth_token, other_auth_token
) -> None:
    first = client.post(f"/api/v1/chat/start/{other_user.id}", headers=auth_token).json()
    reverse = client.post(f"/api/v1/chat/start/{test_user.id}", headers=other_auth_token).json()

    assert first["id"] == reverse["id"]
    assert first["other_participant"]["username"] == "bob"
    assert reverse["other_participant"]["username"] == "alice"
    assert first["last_message"] is None


def test_cannot_chat_with_self(client, test_user, auth_token) -> None:
    response = client.post(f"/api/v1/chat/start/{test_user.id}", headers=auth_token)

    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_send_and_read_messages(client, other_user, auth_token, other_auth_token) -> None:
    conversation_id = _start(client, auth_token, other_user.id)

    sent = client.post(
        f"/api/v1/chat/{conversation_id}/messages", json={"text": "hi bob"}, headers=auth_token
    )
    listed = client.get(f"/api/v1/chat/{conversation_id}/messages", headers=other_auth_token)
    conversations = client.get("/api/v1/chat/conversations", headers=other_auth_token).json()

    assert sent.status_code == status.HTTP_201_CREATED
    assert [m["text"] for m in listed.json()] == ["hi bob"]
    assert listed.json()[0]["is_read"] is True
    assert conversations[0]["id"] == conversation_id
    assert conversations[0]["last_message"]["text"] == "hi bob"


def test_outsiders_cannot_read_or_post(client, make_user, other_user, auth_token) -> None:
    conversation_id = _start(client, auth_token, other_user.id)
    outsider = {"Authorization": f"Bearer {create_access_token(make_user('carol').id)}"}

    read = client.get(f"/api/v1/chat/{conversation_id}/messages", headers=outsider)
    post = client.post(
        f"/api/v1/chat/{conversation_id}/messages", json={"text": "hey"}, headers=outsider
    )

    assert read.status_code == status.HTTP_403_FORBIDDEN
    assert post.status_code == status.HTTP_403_FORBIDDEN


def test_chat_socket_relays_messages_and_typing(
    client, test_user, other_user, auth_token
) -> None:
    conversation_id = _start(client, auth_token, other_user.id)
    token = create_access_token(other_user.id)

    with client.websocket_connect(f"/ws/chat?token={token}") as socket:
        socket.send_json({"event": "joinConversation", "data": conversation_id})
        assert socket.receive_json() == {"event": "joinedConversation", "data": conversation_id}

        client.post(
            f"/api/v1/chat/{conversation_id}/messages", json={"text": "live"}, headers=auth_token
        )
        frame = socket.receive_json()
        assert frame["event"] == "newMessage"
        assert frame["data"]["text"] == "live"
        assert frame["data"]["sender_id"] == test_user.id

        client.post(f"/api/v1/chat/{conversation_id}/typing", headers=auth_token)
        assert socket.receive_json() == {
            "event": "typing",
            "data": {"conversation_id": conversation_id, "user_id": test_user.id},
        }

        socket.send_json({"event": "leaveConversation", "data": conversation_id})
        assert socket.receive_json() == {"event": "leftConversation", "data": conversation_id}


def test_chat_socket_reports_typing_errors(client, make_user, other_user, auth_token) -> None:
    conversation_id = _start(client, auth_token, other_user.id)
    token = create_access_token(make_user("carol").id)

    with client.websocket_connect(f"/ws/chat?token={token}") as socket:
        socket.send_text("not json")
        socket.send_json({"event": "typing", "data": conversation_id})
        frame = socket.receive_json()

    assert frame["event"] == "error"
    assert frame["data"]["kind"] == "unauthorized"


def test_chat_socket_opens_a_session_per_typing_frame(
    app, client, db_session, make_user, other_user, auth_token
) -> None:
    conversation_id = _start(client, auth_token, other_user.id)
    token = create_access_token(make_user("carol").id)
    events: list[str] = []

    @contextmanager
    def recording_session():
        events.append("open")
        try:
            yield db_session
        finally:
            events.append("closed")

    app.dependency_overrides[get_session_factory] = lambda: recording_session

    with client.websocket_connect(f"/ws/chat?token={token}") as socket:
        assert events == []
        socket.send_json({"event": "typing", "data": conversation_id})
        first = socket.receive_json()
        socket.send_json({"event": "typing", "data": conversation_id})
        second = socket.receive_json()

    assert [first["event"], second["event"]] == ["error", "error"]
    assert events == ["open", "closed", "open", "closed"]
