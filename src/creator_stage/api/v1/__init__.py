# src/creator_stage/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    auth_router,
    chat_router,
    content_router,
    gigs_router,
    interactions_router,
    notifications_router,
    realtime_router,
    search_router,
    settings_router,
    system_router,
    users_router,
)

__all__ = [
    "auth_router",
    "users_router",
    "content_router",
    "interactions_router",
    "chat_router",
    "notifications_router",
    "search_router",
    "settings_router",
    "gigs_router",
    "system_router",
    "realtime_router",
]
