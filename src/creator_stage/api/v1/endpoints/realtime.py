# src/creator_stage/api/v1/endpoints/realtime.py
"""WebSocket endpoints that relay chat and notification events."""

from __future__ import annotations

import asyncio
import json
import logging

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from creator_stage.core.security import decode_access_token
from creator_stage.core.settings import settings
from creator_stage.realtime import QueueConnection
from creator_stage.services import ChatService
from creator_stage.services.errors import ServiceError

from ..dependencies import RealtimeDep, SessionFactoryDep

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ws", tags=["realtime"])


async def _pump(websocket: WebSocket, connection: QueueConnection) -> None:
    """Write queued frames to the socket until the connection closes."""
    async for frame in connection.frames():
        try:
            await websocket.send_json(frame)
        except (WebSocketDisconnect, RuntimeError):
            return


async def _receive_frames(websocket: WebSocket):
    """Yield ``(event, data)`` pairs from JSON text frames, skipping garbage."""
    while True:
        raw = await websocket.receive_text()
        try:
            message = json.loads(raw)
        except json.JSONDecodeError:
            logger.debug("Ignoring non-JSON socket frame")
            continue
        if not isinstance(message, dict) or not isinstance(message.get("event"), str):
            continue
        yield message["event"], message.get("data")


@router.websocket("/chat")
async def chat_socket(
    websocket: WebSocket,
    realtime: RealtimeDep,
    session_factory: SessionFactoryDep,
    token: str | None = Query(None),
) -> None:
    """Chat socket.

    Client frames are ``{"event": ..., "data": "<conversation id>"}`` with
    events ``joinConversation``, ``leaveConversation`` and ``typing``. The
    server pushes ``newMessage`` and ``typing`` for joined conversations.
    """
    await websocket.accept()
    user_id = decode_access_token(token) if token else None
    connection = QueueConnection(user_id, maxsize=settings.realtime_queue_size)
    gateway = realtime.chat
    registered = gateway.handle_connection(connection)
    sender = asyncio.create_task(_pump(websocket, connection))

    try:
        async for event, data in _receive_frames(websocket):
            if not registered or not isinstance(data, str):
                continue
            if event == "joinConversation":
                if gateway.join_conversation(connection, data):
                    connection.send("joinedConversation", data)
            elif event == "leaveConversation":
                gateway.leave_conversation(connection, data)
                connection.send("leftConversation", data)
            elif event == "typing":
                # Short session per frame so an idle socket holds no connection.
                with session_factory() as db:
                    try:
                        ChatService(db, realtime.chat_bus).send_typing(connection.user_id, data)
                    except ServiceError as exc:
                        connection.send("error", exc.to_dict())
    except WebSocketDisconnect:
        pass
    finally:
        gateway.handle_disconnect(connection)
        connection.close()
        sender.cancel()


@router.websocket("/notifications")
async def notification_socket(
    websocket: WebSocket,
    realtime: RealtimeDep,
    token: str | None = Query(None),
) -> None:
    """Notification socket: pushes a ``notification`` frame per new notification."""
    await websocket.accept()
    user_id = decode_access_token(token) if token else None
    connection = QueueConnection(user_id, maxsize=settings.realtime_queue_size)
    gateway = realtime.notifications
    gateway.handle_connection(connection)
    sender = asyncio.create_task(_pump(websocket, connection))

    try:
        while True:
            # Inbound frames carry nothing; reading detects the disconnect.
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        gateway.handle_disconnect(connection)
        connection.close()
        sender.cancel()
