"""In-process publish/subscribe channels between services and realtime relays.

Services publish domain events without knowing whether any socket layer is
listening; gateways subscribe and translate events into socket frames. Each
event category gets its own typed channel.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Generic, Literal, TypeVar

logger = logging.getLogger(__name__)

E = TypeVar("E")

ChatEventType = Literal["newMessage", "typing"]


@dataclass(frozen=True)
class ChatEvent:
    """Conversation-scoped event relayed to ``conversation:{id}`` rooms."""

    type: ChatEventType
    conversation_id: str
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class NotificationCreated:
    """Emitted after a notification row has been persisted."""

    user_id: str
    notification: dict[str, Any]


class EventBus(Generic[E]):
    """Synchronous fan-out of events to registered callbacks.

    Subscribers run in registration order on the publisher's thread. A failing
    subscriber is logged and skipped; it never propagates into the publisher,
    whose state change has already happened.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._subscribers: list[Callable[[E], None]] = []

    def subscribe(self, callback: Callable[[E], None]) -> Callable[[], None]:
        """Register ``callback`` and return a function that removes it again."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, event: E) -> int:
        """Deliver ``event`` to every subscriber; return how many succeeded."""
        delivered = 0
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                logger.exception("Subscriber %r on bus %s failed", callback, self.name)
                continue
            delivered += 1
        return delivered

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)
