"""Paginated content feeds joined with the viewer's like and subscription state."""
from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from creator_stage.db.time import utcnow
from creator_stage.models import Content, ContentType, Like, Subscription
from creator_stage.schemas.common import Page, Pagination
from creator_stage.schemas.content import ContentResponse, FeedItem
from creator_stage.services.feed_query import (
    FeedFilter,
    FeedQuery,
    build_feed_query,
    build_video_feed_query,
    compile_feed_count,
    compile_feed_query,
)
from creator_stage.services.storage import (
    MEDIA_FOLDER,
    THUMBNAIL_FOLDER,
    MediaStorage,
    get_media_storage,
)
from creator_stage.services.users import to_creator_summary

logger = logging.getLogger(__name__)


def to_content_response(content: Content, storage: MediaStorage) -> ContentResponse:
    return ContentResponse(
        id=content.id,
        title=content.title,
        description=content.description,
        type=content.type,
        media_url=storage.public_url(content.media_path, MEDIA_FOLDER),
        thumbnail_url=storage.public_url(content.thumbnail_path, THUMBNAIL_FOLDER),
        tags=content.tag_names,
        is_published=content.is_published,
        view_count=content.view_count,
        like_count=content.like_count,
        comments_count=content.comments_count,
        created_at=content.created_at,
        updated_at=content.updated_at,
    )


def to_feed_item(
    content: Content,
    storage: MediaStorage,
    *,
    is_liked: bool = False,
    is_subscribed: bool = False,
    is_blurred: bool = False,
) -> FeedItem:
    return FeedItem(
        id=content.id,
        title=content.title,
        description=content.description,
        type=content.type,
        media_url=storage.public_url(content.media_path, MEDIA_FOLDER),
        thumbnail_url=storage.public_url(content.thumbnail_path, THUMBNAIL_FOLDER),
        tags=content.tag_names,
        view_count=content.view_count,
        like_count=content.like_count,
        comments_count=content.comments_count,
        created_at=content.created_at,
        creator=to_creator_summary(content.creator, storage),
        is_liked=is_liked,
        is_subscribed=is_subscribed,
        is_blurred=is_blurred,
    )


class FeedService:
    """Builds community and video feeds."""

    def __init__(self, db: Session, storage: MediaStorage | None = None) -> None:
        self.db = db
        self.storage = storage or get_media_storage()

    def get_community_content(
        self,
        feed_filter: FeedFilter,
        viewer_id: str | None,
        now: datetime | None = None,
    ) -> Page[FeedItem]:
        """Return one page of the requested feed variant.

        Args:
            feed_filter: Variant, optional tag and page.
            viewer_id: Viewer whose like / subscription state is attached.
            now: Reference time for time-windowed variants.

        Returns:
            Feed items with ``pagination.has_next_page = total > skip + limit``.
        """
        spec = build_feed_query(feed_filter, viewer_id, now or utcnow())
        contents, total = self._run(spec)
        return Page[FeedItem](
            items=self.decorate(contents, viewer_id),
            pagination=Pagination.build(total, spec.page, spec.limit),
        )

    def get_feed_videos(
        self,
        initial_id: str | None,
        viewer_id: str | None,
        page: int = 1,
        limit: int = 10,
    ) -> Page[FeedItem]:
        """Return a page of videos, prepending ``initial_id`` when it names one.

        The resumed video is fetched on its own and excluded from the paginated
        query, so it appears exactly once and always first.
        """
        initial: Content | None = None
        if initial_id:
            initial = self.db.scalar(
                select(Content)
                .options(selectinload(Content.creator))
                .where(
                    Content.id == initial_id,
                    Content.type == ContentType.VIDEO,
                    Content.is_published.is_(True),
                )
            )

        spec = build_video_feed_query(page, limit, exclude_id=initial.id if initial else None)
        contents, total = self._run(spec)
        if initial is not None:
            contents = [initial, *contents]

        return Page[FeedItem](
            items=self.decorate(contents, viewer_id, blur_verified=True),
            pagination=Pagination.build(total, spec.page, spec.limit),
        )

    def _run(self, spec: FeedQuery) -> tuple[list[Content], int]:
        stmt = compile_feed_query(spec).options(selectinload(Content.creator))
        contents = list(self.db.scalars(stmt).all())
        total = self.db.scalar(compile_feed_count(spec)) or 0
        logger.debug("Feed page %d: %d of %d item(s)", spec.page, len(contents), total)
        return contents, total

    def decorate(
        self,
        contents: Sequence[Content],
        viewer_id: str | None,
        *,
        blur_verified: bool = False,
    ) -> list[FeedItem]:
        """Attach viewer state using two batched lookups for the whole page."""
        liked = self.liked_content_ids(viewer_id, (content.id for content in contents))
        subscribed = self.subscribed_creator_ids(
            viewer_id, (content.creator_id for content in contents if content.creator_id)
        )
        items = []
        for content in contents:
            is_subscribed = content.creator_id in subscribed
            creator = content.creator
            items.append(
                to_feed_item(
                    content,
                    self.storage,
                    is_liked=content.id in liked,
                    is_subscribed=is_subscribed,
                    is_blurred=bool(
                        blur_verified
                        and creator is not None
                        and creator.is_verified
                        and not is_subscribed
                    ),
                )
            )
        return items

    def liked_content_ids(self, viewer_id: str | None, content_ids: Iterable[str]) -> set[str]:
        ids = list(content_ids)
        if viewer_id is None or not ids:
            return set()
        return set(
            self.db.scalars(
                select(Like.content_id).where(Like.user_id == viewer_id, Like.content_id.in_(ids))
            )
        )

    def subscribed_creator_ids(
        self, viewer_id: str | None, creator_ids: Iterable[str]
    ) -> set[str]:
        ids = list(set(creator_ids))
        if viewer_id is None or not ids:
            return set()
        return set(
            self.db.scalars(
                select(Subscription.creator_id).where(
                    Subscription.subscriber_id == viewer_id,
                    Subscription.creator_id.in_(ids),
                    Subscription.is_active.is_(True),
                )
            )
        )
