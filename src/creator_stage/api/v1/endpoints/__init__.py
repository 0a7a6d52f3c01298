# src/creator_stage/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .auth import router as auth_router
from .chat import router as chat_router
from .content import router as content_router
from .gigs import router as gigs_router
from .interactions import router as interactions_router
from .notifications import router as notifications_router
from .realtime import router as realtime_router
from .search import router as search_router
from .settings import router as settings_router
from .system import router as system_router
from .users import router as users_router

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
