"""Content lifecycle: upload, publish, delete, drafts, details and subscriptions."""
from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy import case, delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from creator_stage.core.settings import settings
from creator_stage.models import (
    Comment,
    Content,
    ContentType,
    Like,
    NotificationType,
    Subscription,
    User,
)
from creator_stage.schemas.content import (
    ContentCreate,
    ContentStats,
    DraftsResponse,
    FeedItem,
    SubscriptionResponse,
)
from creator_stage.services.errors import ConflictError, NotFoundError, ValidationError
from creator_stage.services.feed import FeedService, to_content_response
from creator_stage.services.notifications import NotificationService
from creator_stage.services.storage import (
    ALLOWED_IMAGE_TYPES,
    ALLOWED_VIDEO_TYPES,
    MEDIA_FOLDER,
    THUMBNAIL_FOLDER,
    MediaStorage,
    UploadedFile,
    get_media_storage,
)
from creator_stage.services.users import to_user_summary

logger = logging.getLogger(__name__)


def validate_media(content_type: ContentType, media: UploadedFile) -> None:
    """Check the upload's MIME family and size against the declared content type."""
    if content_type is ContentType.VIDEO:
        if media.family != "video" or media.content_type not in ALLOWED_VIDEO_TYPES:
            raise ValidationError("Invalid file type. Expected video file.")
        if media.size > settings.max_video_bytes:
            raise ValidationError("Video exceeds the maximum upload size")
    else:
        if media.family != "image" or media.content_type not in ALLOWED_IMAGE_TYPES:
            raise ValidationError("Invalid file type. Expected image file.")
        if media.size > settings.max_image_bytes:
            raise ValidationError("Image exceeds the maximum upload size")


def validate_thumbnail(thumbnail: UploadedFile) -> None:
    if thumbnail.content_type not in ALLOWED_IMAGE_TYPES:
        raise ValidationError("Thumbnail must be an image")
    if thumbnail.size > settings.max_thumbnail_bytes:
        raise ValidationError("Thumbnail exceeds the maximum upload size")


class ContentService:
    """Owner-side operations on content plus creator subscriptions."""

    def __init__(
        self,
        db: Session,
        storage: MediaStorage | None = None,
        notifications: NotificationService | None = None,
    ) -> None:
        self.db = db
        self.storage = storage or get_media_storage()
        self.notifications = notifications or NotificationService(db)

    def create_content(
        self,
        user_id: str,
        data: ContentCreate,
        media: UploadedFile,
        thumbnail: UploadedFile | None = None,
    ) -> Content:
        """Store the uploaded files and create an unpublished draft.

        Args:
            user_id: Creator of the content.
            data: Title, description, type and tags.
            media: The image or video file.
            thumbnail: Poster image; required for videos.

        Returns:
            The new draft.

        Raises:
            ValidationError: On a MIME / size mismatch or a video without thumbnail.
        """
        validate_media(data.type, media)
        if data.type is ContentType.VIDEO and thumbnail is None:
            raise ValidationError("Thumbnail is required for video content.")
        if thumbnail is not None:
            validate_thumbnail(thumbnail)

        media_path = self.storage.save(MEDIA_FOLDER, media)
        thumbnail_path = self.storage.save(THUMBNAIL_FOLDER, thumbnail) if thumbnail else None

        content = Content(
            title=data.title,
            description=data.description,
            type=data.type,
            media_path=media_path,
            thumbnail_path=thumbnail_path,
            creator_id=user_id,
            is_published=False,
        )
        content.tag_names = data.tags
        self.db.add(content)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            self.storage.delete(media_path)
            self.storage.delete(thumbnail_path)
            raise
        logger.info("User %s created %s draft %s", user_id, data.type.value, content.id)
        return content

    def _get_owned(self, user_id: str, content_id: str) -> Content:
        content = self.db.scalar(
            select(Content).where(Content.id == content_id, Content.creator_id == user_id)
        )
        if content is None:
            raise NotFoundError("Content not found")
        return content

    def publish_content(self, user_id: str, content_id: str) -> Content:
        content = self._get_owned(user_id, content_id)
        if content.type is ContentType.VIDEO and not content.thumbnail_path:
            raise ValidationError("Cannot publish video without thumbnail")
        content.is_published = True
        self.db.commit()
        return content

    def set_thumbnail(self, user_id: str, content_id: str, thumbnail: UploadedFile) -> Content:
        """Attach or replace the thumbnail of owned content."""
        content = self._get_owned(user_id, content_id)
        validate_thumbnail(thumbnail)
        previous = content.thumbnail_path
        content.thumbnail_path = self.storage.save(THUMBNAIL_FOLDER, thumbnail)
        self.db.commit()
        if previous:
            self.storage.delete(previous)
        return content

    def delete_content(self, user_id: str, content_id: str) -> None:
        """Delete owned content with its likes, comments and tags, then its files.

        File removal is best effort: a missing or locked file is logged and the
        deletion of the rows stands.
        """
        content = self._get_owned(user_id, content_id)
        paths = [content.media_path, content.thumbnail_path]

        comment_ids = select(Comment.id).where(Comment.content_id == content.id)
        self.db.execute(delete(Like).where(Like.comment_id.in_(comment_ids)))
        self.db.execute(delete(Like).where(Like.content_id == content.id))
        self.db.execute(delete(Comment).where(Comment.content_id == content.id))
        self.db.delete(content)
        self.db.commit()
        logger.info("User %s deleted content %s", user_id, content_id)

        for path in paths:
            self.storage.delete(path)

    def get_drafts(self, user_id: str) -> DraftsResponse:
        drafts = self.db.scalars(
            select(Content)
            .where(Content.creator_id == user_id, Content.is_published.is_(False))
            .order_by(Content.created_at.desc())
        ).all()
        return DraftsResponse(
            videos=[
                to_content_response(draft, self.storage)
                for draft in drafts
                if draft.type is ContentType.VIDEO
            ],
            images=[
                to_content_response(draft, self.storage)
                for draft in drafts
                if draft.type is ContentType.IMAGE
            ],
        )

    def get_content_details(self, content_id: str, viewer_id: str | None) -> FeedItem:
        """Return one item with viewer state and count the view.

        Drafts are only visible to their creator.
        """
        content = self.db.scalar(
            select(Content).options(selectinload(Content.creator)).where(Content.id == content_id)
        )
        if content is None or (not content.is_published and content.creator_id != viewer_id):
            raise NotFoundError("Content not found")

        self.db.execute(
            update(Content)
            .where(Content.id == content.id)
            .values(view_count=Content.view_count + 1)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        self.db.refresh(content)
        return FeedService(self.db, self.storage).decorate([content], viewer_id)[0]

    def get_content_stats(self, user_id: str) -> ContentStats:
        row = self.db.execute(
            select(
                func.count(Content.id),
                func.sum(case((Content.type == ContentType.VIDEO, 1), else_=0)),
                func.sum(case((Content.type == ContentType.IMAGE, 1), else_=0)),
                func.sum(Content.like_count),
                func.sum(Content.view_count),
                func.sum(Content.comments_count),
            ).where(Content.creator_id == user_id)
        ).one()
        total, videos, images, likes, views, comments = (int(value or 0) for value in row)
        return ContentStats(
            total_content=total,
            video_count=videos,
            image_count=images,
            total_likes=likes,
            total_views=views,
            total_comments=comments,
        )

    # -- subscriptions --------------------------------------------------------
    def subscribe(self, subscriber_id: str, creator_id: str) -> Subscription:
        """Subscribe to a creator, reactivating an earlier subscription if any.

        Raises:
            ValidationError: When subscribing to oneself.
            NotFoundError: If the creator does not exist.
            ConflictError: If already subscribed.
        """
        if subscriber_id == creator_id:
            raise ValidationError("Cannot subscribe to yourself")
        if self.db.get(User, creator_id) is None:
            raise NotFoundError("Creator not found")

        subscription = self.db.scalar(
            select(Subscription).where(
                Subscription.subscriber_id == subscriber_id,
                Subscription.creator_id == creator_id,
            )
        )
        if subscription is not None:
            if subscription.is_active:
                raise ConflictError("Already subscribed to this creator")
            subscription.is_active = True
        else:
            subscription = Subscription(
                subscriber_id=subscriber_id, creator_id=creator_id, is_active=True
            )
            try:
                with self.db.begin_nested():
                    self.db.add(subscription)
            except IntegrityError as err:
                raise ConflictError("Already subscribed to this creator") from err
        self.db.commit()

        subscriber = self.db.get(User, subscriber_id)
        username = subscriber.username if subscriber is not None else "Someone"
        self.notifications.dispatch(
            creator_id,
            NotificationType.FOLLOW,
            "New Subscriber",
            f"{username} subscribed to you",
            {"user_id": subscriber_id, "username": username},
            f"/profile/{subscriber_id}",
        )
        return subscription

    def unsubscribe(self, subscriber_id: str, creator_id: str) -> None:
        result = self.db.execute(
            update(Subscription)
            .where(
                Subscription.subscriber_id == subscriber_id,
                Subscription.creator_id == creator_id,
                Subscription.is_active.is_(True),
            )
            .values(is_active=False)
        )
        if not result.rowcount:
            self.db.rollback()
            raise ValidationError("Not subscribed to this creator")
        self.db.commit()

    def get_subscriptions(self, user_id: str) -> list[SubscriptionResponse]:
        subscriptions: Sequence[Subscription] = self.db.scalars(
            select(Subscription)
            .options(selectinload(Subscription.creator))
            .where(Subscription.subscriber_id == user_id, Subscription.is_active.is_(True))
            .order_by(Subscription.created_at.desc())
        ).all()
        return [
            SubscriptionResponse(
                id=subscription.id,
                creator=to_user_summary(subscription.creator, self.storage),
                created_at=subscription.created_at,
            )
            for subscription in subscriptions
        ]
