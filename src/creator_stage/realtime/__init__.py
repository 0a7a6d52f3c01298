"""Realtime fan-out of domain events to WebSocket connections."""

from .bus import ChatEvent, EventBus, NotificationCreated
from .chat import ChatGateway
from .connection import Connection, QueueConnection
from .notifications import NotificationGateway
from .registry import ConnectionRegistry
from .runtime import Realtime, get_realtime, reset_realtime

__all__ = [
    "ChatEvent",
    "ChatGateway",
    "Connection",
    "ConnectionRegistry",
    "EventBus",
    "NotificationCreated",
    "NotificationGateway",
    "QueueConnection",
    "Realtime",
    "get_realtime",
    "reset_realtime",
]
