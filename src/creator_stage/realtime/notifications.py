"""Per-user relay of freshly created notifications.

Unlike chat, there are no rooms: a notification goes to every live
connection of its recipient (several devices, several tabs).
"""

from __future__ import annotations

import logging

from creator_stage.realtime.bus import EventBus, NotificationCreated
from creator_stage.realtime.connection import Connection
from creator_stage.realtime.registry import ConnectionRegistry

logger = logging.getLogger(__name__)


class NotificationGateway:
    """Pushes ``notification`` frames to all connections of the recipient."""

    def __init__(
        self,
        bus: EventBus[NotificationCreated],
        *,
        users: ConnectionRegistry | None = None,
    ) -> None:
        self.users = users if users is not None else ConnectionRegistry()
        self._connections: dict[str, Connection] = {}
        self._unsubscribe = bus.subscribe(self.handle_notification_created)

    def handle_connection(self, connection: Connection) -> bool:
        if not connection.user_id:
            return False
        self._connections[connection.id] = connection
        self.users.register(connection.user_id, connection.id)
        logger.info(
            "Notification connection %s registered for user %s",
            connection.id,
            connection.user_id,
        )
        return True

    def handle_disconnect(self, connection: Connection) -> None:
        self._connections.pop(connection.id, None)
        if connection.user_id:
            self.users.unregister(connection.user_id, connection.id)

    def handle_notification_created(self, event: NotificationCreated) -> int:
        delivered = 0
        for connection_id in self.users.lookup(event.user_id):
            connection = self._connections.get(connection_id)
            if connection is not None and connection.send("notification", event.notification):
                delivered += 1
        logger.debug("Pushed notification to %d connection(s) of %s", delivered, event.user_id)
        return delivered

    def close(self) -> None:
        self._unsubscribe()
