"""Room-based relay of chat events to WebSocket connections.

Connections join ``user:{id}`` automatically on connect and must explicitly
join ``conversation:{id}`` rooms. Chat events are delivered only to sockets
in the matching conversation room, in the order they were published.
"""

from __future__ import annotations

import logging

from creator_stage.realtime.bus import ChatEvent, EventBus
from creator_stage.realtime.connection import Connection
from creator_stage.realtime.registry import ConnectionRegistry

logger = logging.getLogger(__name__)


def user_room(user_id: str) -> str:
    return f"user:{user_id}"


def conversation_room(conversation_id: str) -> str:
    return f"conversation:{conversation_id}"


class ChatGateway:
    """Owns chat connections, their user mapping and their room memberships."""

    def __init__(
        self,
        bus: EventBus[ChatEvent],
        *,
        users: ConnectionRegistry | None = None,
        rooms: ConnectionRegistry | None = None,
    ) -> None:
        self.users = users if users is not None else ConnectionRegistry()
        self.rooms = rooms if rooms is not None else ConnectionRegistry()
        self._connections: dict[str, Connection] = {}
        self._unsubscribe = bus.subscribe(self.handle_event)

    # -- connection lifecycle --------------------------------------------------
    def handle_connection(self, connection: Connection) -> bool:
        """Track a new connection; unauthenticated ones are never registered."""
        if not connection.user_id:
            logger.info("Chat connection %s has no user; not registered", connection.id)
            return False
        self._connections[connection.id] = connection
        self.users.register(connection.user_id, connection.id)
        self.rooms.register(user_room(connection.user_id), connection.id)
        logger.info(
            "Chat connection %s registered for user %s", connection.id, connection.user_id
        )
        return True

    def handle_disconnect(self, connection: Connection) -> None:
        """Forget a connection. Safe to call repeatedly."""
        self._connections.pop(connection.id, None)
        if connection.user_id:
            self.users.unregister(connection.user_id, connection.id)
        self.rooms.discard(connection.id)

    def join_conversation(self, connection: Connection, conversation_id: str) -> bool:
        if connection.id not in self._connections:
            return False
        self.rooms.register(conversation_room(conversation_id), connection.id)
        return True

    def leave_conversation(self, connection: Connection, conversation_id: str) -> None:
        self.rooms.unregister(conversation_room(conversation_id), connection.id)

    # -- fan-out ---------------------------------------------------------------
    def handle_event(self, event: ChatEvent) -> int:
        """Relay a bus event to its conversation room."""
        return self.emit_to_room(conversation_room(event.conversation_id), event.type, event.data)

    def emit_to_room(self, room: str, event: str, data: object) -> int:
        delivered = 0
        for connection_id in self.rooms.lookup(room):
            connection = self._connections.get(connection_id)
            if connection is None:
                continue
            if connection.send(event, data):
                delivered += 1
        logger.debug("Relayed %s to %d connection(s) in %s", event, delivered, room)
        return delivered

    def connections_for_user(self, user_id: str) -> list[str]:
        return self.users.lookup(user_id)

    def close(self) -> None:
        self._unsubscribe()
