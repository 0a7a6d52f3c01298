# src/creator_stage/services/__init__.py
"""Business logic services for the Creator Stage application."""

from .chat import ChatService
from .content import ContentService
from .feed import FeedService
from .gigs import GigService
from .interactions import InteractionService, LikeResult
from .notifications import NotificationService
from .profile import ProfileService
from .search import SearchService
from .storage import MediaStorage, UploadedFile
from .users import UserService

__all__ = [
    "ChatService",
    "ContentService",
    "FeedService",
    "GigService",
    "InteractionService",
    "LikeResult",
    "MediaStorage",
    "NotificationService",
    "ProfileService",
    "SearchService",
    "UploadedFile",
    "UserService",
]
