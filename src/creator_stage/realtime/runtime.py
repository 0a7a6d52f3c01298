"""Process-wide realtime wiring: one bus per event category plus its gateway."""

from __future__ import annotations

from creator_stage.realtime.bus import ChatEvent, EventBus, NotificationCreated
from creator_stage.realtime.chat import ChatGateway
from creator_stage.realtime.notifications import NotificationGateway


class Realtime:
    """Buses the services publish on and the gateways that relay them."""

    def __init__(self) -> None:
        self.chat_bus: EventBus[ChatEvent] = EventBus("chat")
        self.notification_bus: EventBus[NotificationCreated] = EventBus("notifications")
        self.chat = ChatGateway(self.chat_bus)
        self.notifications = NotificationGateway(self.notification_bus)

    def close(self) -> None:
        self.chat.close()
        self.notifications.close()


class _RealtimeSingleton:
    """Singleton wrapper for the realtime runtime."""

    _instance: Realtime | None = None

    @classmethod
    def get_instance(cls) -> Realtime:
        """Get or create the singleton runtime."""
        if cls._instance is None:
            cls._instance = Realtime()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        if cls._instance is not None:
            cls._instance.close()
        cls._instance = None


def get_realtime() -> Realtime:
    """Return the process-wide realtime runtime."""
    return _RealtimeSingleton.get_instance()


def reset_realtime() -> None:
    """Drop the current runtime; the next ``get_realtime`` builds a fresh one."""
    _RealtimeSingleton.reset()
