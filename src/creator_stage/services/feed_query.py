"""Feed variants as plain data, and their translation to SQL.

A feed request is first mapped to a :class:`FeedQuery` (which predicates,
which sort keys, which page) without touching the database. The resulting
specification is then compiled once into a SQLAlchemy ``Select``. Keeping
the two steps apart lets the variant rules be checked in isolation.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from functools import singledispatch
from typing import Literal

from sqlalchemy import ColumnElement, Select, func, select

from creator_stage.core.settings import settings
from creator_stage.models import Content, ContentTag, ContentType, Subscription
from creator_stage.services.errors import ValidationError


class FeedType(str, enum.Enum):
    """Named ranking / filtering strategies over published content."""

    FOR_YOU = "for-you"
    SUBSCRIBED = "subscribed"
    TRENDING = "trending"
    TAGGED = "tagged"


@dataclass(frozen=True)
class FeedFilter:
    feed: FeedType = FeedType.FOR_YOU
    tag: str | None = None
    page: int = 1
    limit: int = 10


# -- predicates ---------------------------------------------------------------
@dataclass(frozen=True)
class Published:
    pass


@dataclass(frozen=True)
class OfType:
    content_type: ContentType


@dataclass(frozen=True)
class CreatedSince:
    since: datetime


@dataclass(frozen=True)
class HasTag:
    tag: str


@dataclass(frozen=True)
class SubscribedBy:
    """Creator is among the viewer's active subscriptions."""

    viewer_id: str | None


@dataclass(frozen=True)
class ExcludeIds:
    ids: tuple[str, ...]


Predicate = Published | OfType | CreatedSince | HasTag | SubscribedBy | ExcludeIds

SortField = Literal["created_at", "like_count", "view_count"]


@dataclass(frozen=True)
class SortKey:
    field: SortField
    descending: bool = True


RECENT_FIRST = (SortKey("created_at"), SortKey("like_count"))
MOST_VIEWED_FIRST = (SortKey("view_count"), SortKey("like_count"))


@dataclass(frozen=True)
class FeedQuery:
    """Predicates + sort keys + offset pagination."""

    predicates: tuple[Predicate, ...] = ()
    sort: tuple[SortKey, ...] = RECENT_FIRST
    page: int = 1
    limit: int = 10
    exclusions: tuple[str, ...] = field(default=())

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def excluding(self, *content_ids: str) -> FeedQuery:
        return replace(self, exclusions=self.exclusions + tuple(content_ids))

    def has_next_page(self, total: int) -> bool:
        return total > self.offset + self.limit


def _clamp_page(page: int, limit: int) -> tuple[int, int]:
    return max(page, 1), min(max(limit, 1), settings.max_page_size)


def _normalize_tag(tag: str | None) -> str | None:
    if tag is None:
        return None
    tag = tag.strip().lstrip("#").lower()
    return tag or None


def build_feed_query(
    feed_filter: FeedFilter,
    viewer_id: str | None,
    now: datetime,
    *,
    trending_window_days: int | None = None,
) -> FeedQuery:
    """Map a feed request to its query specification.

    Args:
        feed_filter: Requested variant, optional tag and page.
        viewer_id: Viewer, needed by the subscribed feed.
        now: Reference time for the trending window.
        trending_window_days: Overrides the configured trending window.

    Returns:
        The specification; every variant only ever sees published content.

    Raises:
        ValidationError: If the tagged feed is requested without a tag.
    """
    page, limit = _clamp_page(feed_filter.page, feed_filter.limit)
    tag = _normalize_tag(feed_filter.tag)
    predicates: list[Predicate] = [Published()]
    sort = RECENT_FIRST

    if feed_filter.feed is FeedType.SUBSCRIBED:
        predicates.append(SubscribedBy(viewer_id))
    elif feed_filter.feed is FeedType.TRENDING:
        days = trending_window_days or settings.trending_window_days
        predicates.append(CreatedSince(now - timedelta(days=days)))
        sort = MOST_VIEWED_FIRST
    elif feed_filter.feed is FeedType.TAGGED and tag is None:
        raise ValidationError("The tagged feed requires a tag")

    if tag is not None:
        predicates.append(HasTag(tag))

    return FeedQuery(predicates=tuple(predicates), sort=sort, page=page, limit=limit)


def build_video_feed_query(page: int, limit: int, exclude_id: str | None = None) -> FeedQuery:
    """Published videos, newest first, optionally without one resumed item."""
    page, limit = _clamp_page(page, limit)
    spec = FeedQuery(
        predicates=(Published(), OfType(ContentType.VIDEO)),
        sort=(SortKey("created_at"),),
        page=page,
        limit=limit,
    )
    return spec.excluding(exclude_id) if exclude_id else spec


# -- compilation --------------------------------------------------------------
@singledispatch
def compile_predicate(predicate: object) -> ColumnElement[bool]:
    raise TypeError(f"Unsupported feed predicate: {predicate!r}")


@compile_predicate.register
def _(predicate: Published) -> ColumnElement[bool]:
    return Content.is_published.is_(True)


@compile_predicate.register
def _(predicate: OfType) -> ColumnElement[bool]:
    return Content.type == predicate.content_type


@compile_predicate.register
def _(predicate: CreatedSince) -> ColumnElement[bool]:
    return Content.created_at >= predicate.since


@compile_predicate.register
def _(predicate: HasTag) -> ColumnElement[bool]:
    tagged = select(ContentTag.content_id).where(ContentTag.name == predicate.tag)
    return Content.id.in_(tagged)


@compile_predicate.register
def _(predicate: SubscribedBy) -> ColumnElement[bool]:
    followed = select(Subscription.creator_id).where(
        Subscription.subscriber_id == predicate.viewer_id,
        Subscription.is_active.is_(True),
    )
    return Content.creator_id.in_(followed)


@compile_predicate.register
def _(predicate: ExcludeIds) -> ColumnElement[bool]:
    return Content.id.not_in(predicate.ids)


def _where_clauses(spec: FeedQuery) -> list[ColumnElement[bool]]:
    clauses = [compile_predicate(predicate) for predicate in spec.predicates]
    if spec.exclusions:
        clauses.append(compile_predicate(ExcludeIds(spec.exclusions)))
    return clauses


def compile_feed_query(spec: FeedQuery) -> Select[tuple[Content]]:
    """Translate a specification to a paginated ``SELECT`` over content."""
    order_by = []
    for key in spec.sort:
        column = getattr(Content, key.field)
        order_by.append(column.desc() if key.descending else column.asc())
    # Stable order across pages.
    order_by.append(Content.id.asc())
    return (
        select(Content)
        .where(*_where_clauses(spec))
        .order_by(*order_by)
        .offset(spec.offset)
        .limit(spec.limit)
    )


def compile_feed_count(spec: FeedQuery) -> Select[tuple[int]]:
    """``SELECT count(*)`` over the same predicates, ignoring the page."""
    return select(func.count()).select_from(Content).where(*_where_clauses(spec))
