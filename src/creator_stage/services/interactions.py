"""Likes, threaded comments and the notifications they trigger."""
from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from creator_stage.models import Comment, Content, Like, NotificationType, User, like_target_key
from creator_stage.schemas.interaction import CommentResponse
from creator_stage.services.errors import ConflictError, NotFoundError, ValidationError
from creator_stage.services.notifications import NotificationService
from creator_stage.services.storage import MediaStorage, get_media_storage
from creator_stage.services.users import UserService, to_user_summary

logger = logging.getLogger(__name__)

MENTION_PATTERN = re.compile(r"@([A-Za-z][\w.]*)")


def extract_mentions(text: str) -> list[str]:
    """Return the distinct ``@username`` handles in ``text``, in order of appearance."""
    names: dict[str, None] = {}
    for match in MENTION_PATTERN.finditer(text):
        name = match.group(1).rstrip(".")
        if name:
            names.setdefault(name, None)
    return list(names)


@dataclass(frozen=True)
class LikeResult:
    is_liked: bool
    like_count: int


class InteractionService:
    """Toggles likes and stores comments, keeping the denormalized counters in step."""

    def __init__(
        self,
        db: Session,
        notifications: NotificationService | None = None,
        storage: MediaStorage | None = None,
    ) -> None:
        self.db = db
        self.notifications = notifications or NotificationService(db)
        self.storage = storage or get_media_storage()

    # -- likes ----------------------------------------------------------------
    def toggle_like(
        self,
        user_id: str,
        *,
        content_id: str | None = None,
        comment_id: str | None = None,
    ) -> LikeResult:
        """Like the target if the user has not yet, otherwise remove the like.

        Args:
            user_id: The acting user.
            content_id: Content to (un)like; mutually exclusive with ``comment_id``.
            comment_id: Comment to (un)like.

        Returns:
            Whether the target is now liked and its updated like count.

        Raises:
            ValidationError: Unless exactly one target is given.
            NotFoundError: If the target does not exist.
            ConflictError: If a concurrent toggle created the same like first.
        """
        if (content_id is None) == (comment_id is None):
            raise ValidationError("Exactly one of content_id or comment_id is required")

        model: type[Content] | type[Comment] = Content if content_id is not None else Comment
        target = self.db.get(model, content_id if content_id is not None else comment_id)
        if target is None:
            raise NotFoundError(f"{model.__name__} not found")

        key = like_target_key(content_id=content_id, comment_id=comment_id)
        existing = self._find_like(user_id, key)

        if existing is not None:
            # A concurrent unlike may have removed the row since it was read.
            removed = self.db.execute(delete(Like).where(Like.id == existing.id)).rowcount
            delta = -1 if removed else 0
        else:
            like = Like(
                user_id=user_id,
                content_id=content_id,
                comment_id=comment_id,
                target_key=key,
            )
            try:
                with self.db.begin_nested():
                    self.db.add(like)
            except IntegrityError as err:
                raise ConflictError("Like changed concurrently; retry the request") from err
            delta = 1

        # Counter moves in SQL so concurrent toggles on other rows are not lost.
        if delta:
            self.db.execute(
                update(model)
                .where(model.id == target.id)
                .values(like_count=model.like_count + delta)
                .execution_options(synchronize_session=False)
            )
        self.db.commit()
        self.db.refresh(target)

        is_liked = delta > 0
        if is_liked and isinstance(target, Content):
            self._notify_content_like(user_id, target)
        return LikeResult(is_liked=is_liked, like_count=target.like_count)

    def _find_like(self, user_id: str, key: str) -> Like | None:
        return self.db.scalar(
            select(Like).where(Like.user_id == user_id, Like.target_key == key)
        )

    def _notify_content_like(self, user_id: str, content: Content) -> None:
        if content.creator_id is None or content.creator_id == user_id:
            return
        liker = self.db.get(User, user_id)
        username = liker.username if liker is not None else "Someone"
        self.notifications.dispatch(
            content.creator_id,
            NotificationType.LIKE,
            "New Like",
            f'{username} liked your post "{content.title}"',
            {
                "content_id": content.id,
                "content_type": content.type.value,
                "user_id": user_id,
                "username": username,
                "content_title": content.title,
            },
            f"/community/content/{content.id}",
        )

    # -- comments -------------------------------------------------------------
    def add_comment(
        self,
        user_id: str,
        content_id: str,
        text: str,
        parent_id: str | None = None,
    ) -> Comment:
        """Store a comment and notify the parent author, the creator and mentions.

        Each recipient is notified at most once and never the commenter; a failed
        notification does not stop the remaining ones.

        Raises:
            NotFoundError: If the content or the parent comment does not exist.
            ValidationError: If the parent comment belongs to other content.
        """
        content = self.db.get(Content, content_id)
        if content is None:
            raise NotFoundError("Content not found")

        parent: Comment | None = None
        if parent_id is not None:
            parent = self.db.get(Comment, parent_id)
            if parent is None:
                raise NotFoundError("Parent comment not found")
            if parent.content_id != content.id:
                raise ValidationError("Parent comment belongs to different content")

        comment = Comment(text=text, user_id=user_id, content_id=content.id, parent_id=parent_id)
        self.db.add(comment)
        self.db.execute(
            update(Content)
            .where(Content.id == content.id)
            .values(comments_count=Content.comments_count + 1)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        self.db.refresh(content)

        self._notify_comment(user_id, content, comment, parent)
        return comment

    def _notify_comment(
        self,
        user_id: str,
        content: Content,
        comment: Comment,
        parent: Comment | None,
    ) -> None:
        author = self.db.get(User, user_id)
        username = author.username if author is not None else "Someone"
        data = {
            "content_id": content.id,
            "comment_id": comment.id,
            "user_id": user_id,
            "username": username,
            "content_title": content.title,
            "comment_text": comment.text,
        }
        route = f"/community/content/{content.id}?comment={comment.id}"
        notified = {user_id}

        if parent is not None and parent.user_id not in notified:
            self.notifications.dispatch(
                parent.user_id,
                NotificationType.COMMENT,
                "New Reply",
                f"{username} replied to your comment",
                {**data, "parent_comment_id": parent.id},
                route,
            )
            notified.add(parent.user_id)

        if content.creator_id is not None and content.creator_id not in notified:
            self.notifications.dispatch(
                content.creator_id,
                NotificationType.COMMENT,
                "New Comment",
                f'{username} commented on your post "{content.title}"',
                data,
                route,
            )
            notified.add(content.creator_id)

        mentioned = UserService(self.db, self.storage).find_by_usernames(
            extract_mentions(comment.text)
        )
        for user in mentioned:
            if user.id in notified:
                continue
            self.notifications.dispatch(
                user.id,
                NotificationType.MENTION,
                "New Mention",
                f"{username} mentioned you in a comment",
                data,
                route,
            )
            notified.add(user.id)

    def get_comments(self, content_id: str, viewer_id: str | None) -> list[CommentResponse]:
        """Top-level comments, newest first, each with its replies oldest first."""
        if self.db.get(Content, content_id) is None:
            raise NotFoundError("Content not found")
        comments = self.db.scalars(
            select(Comment)
            .options(
                selectinload(Comment.user),
                selectinload(Comment.replies).selectinload(Comment.user),
            )
            .where(Comment.content_id == content_id, Comment.parent_id.is_(None))
            .order_by(Comment.created_at.desc(), Comment.id)
        ).all()
        return self._present(comments, viewer_id)

    def get_replies(self, comment_id: str, viewer_id: str | None) -> list[CommentResponse]:
        if self.db.get(Comment, comment_id) is None:
            raise NotFoundError("Comment not found")
        replies = self.db.scalars(
            select(Comment)
            .options(selectinload(Comment.user))
            .where(Comment.parent_id == comment_id)
            .order_by(Comment.created_at, Comment.id)
        ).all()
        return self._present(replies, viewer_id, nested=False)

    def _present(
        self,
        comments: Sequence[Comment],
        viewer_id: str | None,
        *,
        nested: bool = True,
    ) -> list[CommentResponse]:
        every = list(comments)
        if nested:
            every += [reply for comment in comments for reply in comment.replies]
        liked = self.liked_comment_ids(viewer_id, (comment.id for comment in every))
        return [self._to_response(comment, liked, nested=nested) for comment in comments]

    def _to_response(self, comment: Comment, liked: set[str], *, nested: bool) -> CommentResponse:
        replies = (
            [self._to_response(reply, liked, nested=False) for reply in comment.replies]
            if nested
            else []
        )
        return CommentResponse(
            id=comment.id,
            text=comment.text,
            content_id=comment.content_id,
            parent_id=comment.parent_id,
            like_count=comment.like_count,
            created_at=comment.created_at,
            user=to_user_summary(comment.user, self.storage) if comment.user else None,
            is_liked=comment.id in liked,
            replies=replies,
        )

    def liked_comment_ids(self, viewer_id: str | None, comment_ids: Iterable[str]) -> set[str]:
        ids = list(comment_ids)
        if viewer_id is None or not ids:
            return set()
        return set(
            self.db.scalars(
                select(Like.comment_id).where(Like.user_id == viewer_id, Like.comment_id.in_(ids))
            )
        )
