# src/creator_stage/api/v1/endpoints/interactions.py
"""Like and comment endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from creator_stage.schemas.interaction import CommentCreate, CommentResponse, LikeResponse
from creator_stage.services.users import to_user_summary

from ..dependencies import CurrentUserDep, InteractionServiceDep

router = APIRouter(prefix="/interactions", tags=["interactions"])


@router.post("/content/{content_id}/like", response_model=LikeResponse)
async def like_content(
    content_id: str, current_user: CurrentUserDep, service: InteractionServiceDep
) -> LikeResponse:
    """Toggle the caller's like on a content item."""
    result = service.toggle_like(current_user.id, content_id=content_id)
    return LikeResponse(is_liked=result.is_liked, like_count=result.like_count)


@router.post("/comments/{comment_id}/like", response_model=LikeResponse)
async def like_comment(
    comment_id: str, current_user: CurrentUserDep, service: InteractionServiceDep
) -> LikeResponse:
    """Toggle the caller's like on a comment."""
    result = service.toggle_like(current_user.id, comment_id=comment_id)
    return LikeResponse(is_liked=result.is_liked, like_count=result.like_count)


@router.post(
    "/content/{content_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    content_id: str,
    payload: CommentCreate,
    current_user: CurrentUserDep,
    service: InteractionServiceDep,
) -> CommentResponse:
    comment = service.add_comment(current_user.id, content_id, payload.text, payload.parent_id)
    return CommentResponse(
        id=comment.id,
        text=comment.text,
        content_id=comment.content_id,
        parent_id=comment.parent_id,
        like_count=comment.like_count,
        created_at=comment.created_at,
        user=to_user_summary(current_user, service.storage),
    )


@router.get("/content/{content_id}/comments", response_model=list[CommentResponse])
async def list_comments(
    content_id: str, current_user: CurrentUserDep, service: InteractionServiceDep
) -> list[CommentResponse]:
    return service.get_comments(content_id, current_user.id)


@router.get("/comments/{comment_id}/replies", response_model=list[CommentResponse])
async def list_replies(
    comment_id: str, current_user: CurrentUserDep, service: InteractionServiceDep
) -> list[CommentResponse]:
    return service.get_replies(comment_id, current_user.id)
