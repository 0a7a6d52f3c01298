# src/creator_stage/api/v1/endpoints/content.py
"""Content upload, feed and subscription endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, File, Form, HTTPException, Query, UploadFile, status
from pydantic import ValidationError as PydanticValidationError

from creator_stage.models import ContentType
from creator_stage.schemas.common import Page, StatusMessage
from creator_stage.schemas.content import (
    ContentCreate,
    ContentResponse,
    ContentStats,
    DraftsResponse,
    FeedItem,
    SubscriptionResponse,
)
from creator_stage.services.feed import to_content_response
from creator_stage.services.feed_query import FeedFilter, FeedType

from ..dependencies import (
    ContentServiceDep,
    CurrentUserDep,
    FeedServiceDep,
    LimitQuery,
    PageQuery,
    read_upload,
)

router = APIRouter(prefix="/content", tags=["content"])


@router.post("", response_model=ContentResponse, status_code=status.HTTP_201_CREATED)
async def create_content(
    current_user: CurrentUserDep,
    service: ContentServiceDep,
    title: Annotated[str, Form()],
    type: Annotated[ContentType, Form()],
    media: Annotated[UploadFile, File()],
    description: Annotated[str | None, Form()] = None,
    tags: Annotated[str | None, Form()] = None,
    thumbnail: Annotated[UploadFile | None, File()] = None,
) -> ContentResponse:
    """Upload an image or a video (with thumbnail) as a new draft."""
    try:
        data = ContentCreate(title=title, description=description, type=type, tags=tags)
    except PydanticValidationError as err:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=err.errors(include_url=False, include_context=False),
        ) from err

    media_upload = await read_upload(media)
    thumbnail_upload = await read_upload(thumbnail) if thumbnail is not None else None
    content = service.create_content(current_user.id, data, media_upload, thumbnail_upload)
    return to_content_response(content, service.storage)


@router.get("/community", response_model=Page[FeedItem])
async def community_content(
    current_user: CurrentUserDep,
    feeds: FeedServiceDep,
    feed: FeedType = FeedType.FOR_YOU,
    tag: Annotated[str | None, Query(max_length=64)] = None,
    page: PageQuery = 1,
    limit: LimitQuery = 10,
) -> Page[FeedItem]:
    """Return one page of the selected community feed."""
    return feeds.get_community_content(
        FeedFilter(feed=feed, tag=tag, page=page, limit=limit), current_user.id
    )


@router.get("/feed/videos", response_model=Page[FeedItem])
async def feed_videos(
    current_user: CurrentUserDep,
    feeds: FeedServiceDep,
    initial_id: Annotated[str | None, Query(alias="initialId")] = None,
    page: PageQuery = 1,
    limit: LimitQuery = 10,
) -> Page[FeedItem]:
    """Video feed; ``initialId`` resumes playback at a specific video."""
    return feeds.get_feed_videos(initial_id, current_user.id, page, limit)


@router.get("/drafts", response_model=DraftsResponse)
async def drafts(current_user: CurrentUserDep, service: ContentServiceDep) -> DraftsResponse:
    return service.get_drafts(current_user.id)


@router.get("/stats", response_model=ContentStats)
async def stats(current_user: CurrentUserDep, service: ContentServiceDep) -> ContentStats:
    return service.get_content_stats(current_user.id)


@router.get("/subscriptions", response_model=list[SubscriptionResponse])
async def subscriptions(
    current_user: CurrentUserDep, service: ContentServiceDep
) -> list[SubscriptionResponse]:
    return service.get_subscriptions(current_user.id)


@router.post(
    "/creators/{creator_id}/subscribe",
    response_model=StatusMessage,
    status_code=status.HTTP_201_CREATED,
)
async def subscribe(
    creator_id: str, current_user: CurrentUserDep, service: ContentServiceDep
) -> StatusMessage:
    service.subscribe(current_user.id, creator_id)
    return StatusMessage(message="Successfully subscribed to creator")


@router.delete("/creators/{creator_id}/subscribe", response_model=StatusMessage)
async def unsubscribe(
    creator_id: str, current_user: CurrentUserDep, service: ContentServiceDep
) -> StatusMessage:
    service.unsubscribe(current_user.id, creator_id)
    return StatusMessage(message="Successfully unsubscribed from creator")


@router.get("/{content_id}", response_model=FeedItem)
async def content_details(
    content_id: str, current_user: CurrentUserDep, service: ContentServiceDep
) -> FeedItem:
    """Return one content item with the caller's like / subscription state."""
    return service.get_content_details(content_id, current_user.id)


@router.post("/{content_id}/publish", response_model=ContentResponse)
async def publish(
    content_id: str, current_user: CurrentUserDep, service: ContentServiceDep
) -> ContentResponse:
    content = service.publish_content(current_user.id, content_id)
    return to_content_response(content, service.storage)


@router.post("/{content_id}/thumbnail", response_model=ContentResponse)
async def set_thumbnail(
    content_id: str,
    current_user: CurrentUserDep,
    service: ContentServiceDep,
    thumbnail: Annotated[UploadFile, File()],
) -> ContentResponse:
    content = service.set_thumbnail(current_user.id, content_id, await read_upload(thumbnail))
    return to_content_response(content, service.storage)


@router.delete("/{content_id}", response_model=StatusMessage)
async def delete_content(
    content_id: str, current_user: CurrentUserDep, service: ContentServiceDep
) -> StatusMessage:
    service.delete_content(current_user.id, content_id)
    return StatusMessage(message="Content deleted successfully")
