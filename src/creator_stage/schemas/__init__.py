"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .chat import ConversationResponse, MessageCreate, MessageResponse
from .common import Page, Pagination, StatusMessage
from .content import (
    ContentCreate,
    ContentResponse,
    ContentStats,
    CreatorSummary,
    DraftsResponse,
    FeedItem,
    SubscriptionResponse,
)
from .gig import GigCreate, GigList, GigResponse, GigUpdate
from .interaction import CommentCreate, CommentResponse, LikeResponse
from .notification import (
    NotificationPage,
    NotificationResponse,
    NotificationSettings,
    NotificationSettingsUpdate,
    UnreadCount,
)
from .search import RecentSearch, SearchResults, TrendingSearch
from .user import (
    LoginRequest,
    PrivateUserResponse,
    ProfileUpdateRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
    UserSummary,
)

__all__ = [
    "ConversationResponse", "MessageCreate", "MessageResponse",
    "Page", "Pagination", "StatusMessage",
    "ContentCreate", "ContentResponse", "ContentStats", "CreatorSummary",
    "DraftsResponse", "FeedItem", "SubscriptionResponse",
    "GigCreate", "GigList", "GigResponse", "GigUpdate",
    "CommentCreate", "CommentResponse", "LikeResponse",
    "NotificationPage", "NotificationResponse", "NotificationSettings",
    "NotificationSettingsUpdate", "UnreadCount",
    "RecentSearch", "SearchResults", "TrendingSearch",
    "LoginRequest", "PrivateUserResponse", "ProfileUpdateRequest", "RegisterRequest",
    "TokenResponse", "UserResponse", "UserSummary",
]
