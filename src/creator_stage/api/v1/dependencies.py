"""Shared API dependencies for authentication and service construction."""

from collections.abc import Callable
from contextlib import AbstractContextManager
from typing import Annotated

from fastapi import Depends, HTTPException, Query, UploadFile, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from creator_stage.core.security import decode_access_token
from creator_stage.db.session import SessionLocal, get_db
from creator_stage.models import User
from creator_stage.realtime import Realtime, get_realtime
from creator_stage.services import (
    ChatService,
    ContentService,
    FeedService,
    GigService,
    InteractionService,
    MediaStorage,
    NotificationService,
    ProfileService,
    SearchService,
    UploadedFile,
    UserService,
)
from creator_stage.services.storage import get_media_storage

# HTTP Bearer scheme for JWT authentication
bearer_scheme = HTTPBearer()

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


SessionFactory = Callable[[], AbstractContextManager[Session]]


def get_session_factory() -> SessionFactory:
    """Return the factory long-lived sockets use to open one session per frame."""
    return SessionLocal


SessionFactoryDep = Annotated[SessionFactory, Depends(get_session_factory)]


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
    db: SessionDep,
) -> User:
    """Get the current authenticated user from JWT token.

    Args:
        credentials: HTTP Bearer token credentials
        db: Database session

    Returns:
        User object for the authenticated user

    Raises:
        HTTPException: If token is invalid or user not found
    """
    user_id = decode_access_token(credentials.credentials)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )

    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return user


# Type alias for current user dependency
CurrentUserDep = Annotated[User, Depends(get_current_user)]


def get_realtime_dep() -> Realtime:
    """Return the process-wide realtime runtime."""
    return get_realtime()


def get_storage_dep() -> MediaStorage:
    """Return the media storage bound to the configured upload root."""
    return get_media_storage()


RealtimeDep = Annotated[Realtime, Depends(get_realtime_dep)]
StorageDep = Annotated[MediaStorage, Depends(get_storage_dep)]


def get_notification_service(db: SessionDep, realtime: RealtimeDep) -> NotificationService:
    return NotificationService(db, realtime.notification_bus)


NotificationServiceDep = Annotated[NotificationService, Depends(get_notification_service)]


def get_user_service(db: SessionDep, storage: StorageDep) -> UserService:
    return UserService(db, storage)


def get_chat_service(
    db: SessionDep,
    realtime: RealtimeDep,
    notifications: NotificationServiceDep,
) -> ChatService:
    return ChatService(db, realtime.chat_bus, notifications)


def get_feed_service(db: SessionDep, storage: StorageDep) -> FeedService:
    return FeedService(db, storage)


def get_content_service(
    db: SessionDep,
    storage: StorageDep,
    notifications: NotificationServiceDep,
) -> ContentService:
    return ContentService(db, storage, notifications)


def get_interaction_service(
    db: SessionDep,
    storage: StorageDep,
    notifications: NotificationServiceDep,
) -> InteractionService:
    return InteractionService(db, notifications, storage)


def get_search_service(db: SessionDep, storage: StorageDep) -> SearchService:
    return SearchService(db, storage)


def get_gig_service(db: SessionDep, storage: StorageDep) -> GigService:
    return GigService(db, storage)


def get_profile_service(db: SessionDep, storage: StorageDep) -> ProfileService:
    return ProfileService(db, storage)


UserServiceDep = Annotated[UserService, Depends(get_user_service)]
ChatServiceDep = Annotated[ChatService, Depends(get_chat_service)]
FeedServiceDep = Annotated[FeedService, Depends(get_feed_service)]
ContentServiceDep = Annotated[ContentService, Depends(get_content_service)]
InteractionServiceDep = Annotated[InteractionService, Depends(get_interaction_service)]
SearchServiceDep = Annotated[SearchService, Depends(get_search_service)]
GigServiceDep = Annotated[GigService, Depends(get_gig_service)]
ProfileServiceDep = Annotated[ProfileService, Depends(get_profile_service)]

PageQuery = Annotated[int, Query(ge=1)]
LimitQuery = Annotated[int, Query(ge=1, le=50)]


async def read_upload(upload: UploadFile) -> UploadedFile:
    """Read a multipart upload into memory, detached from the request."""
    data = await upload.read()
    return UploadedFile(
        filename=upload.filename or "upload",
        content_type=upload.content_type or "application/octet-stream",
        data=data,
    )
