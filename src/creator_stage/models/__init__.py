# src/creator_stage/models/__init__.py
"""SQLAlchemy models for the Creator Stage application."""

from .chat import Conversation, Message, conversation_participant, participant_key
from .content import Content, ContentTag, ContentType
from .gig import Gig, GigStatus
from .interaction import Comment, Like, like_target_key
from .notification import Notification, NotificationPreference, NotificationType
from .search import SearchHistory
from .user import Subscription, User

__all__ = [
    "Conversation", "Message", "conversation_participant", "participant_key",
    "Content", "ContentTag", "ContentType",
    "Gig", "GigStatus",
    "Comment", "Like", "like_target_key",
    "Notification", "NotificationPreference", "NotificationType",
    "SearchHistory",
    "Subscription", "User",
]
