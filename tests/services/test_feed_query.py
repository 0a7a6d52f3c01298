"""Tests for the feed query builder; no database involved."""

from datetime import UTC, datetime, timedelta

import pytest

from creator_stage.core.settings import settings
from creator_stage.models import ContentType
from creator_stage.services.errors import ValidationError
from creator_stage.services.feed_query import (
    MOST_VIEWED_FIRST,
    RECENT_FIRST,
    CreatedSince,
    ExcludeIds,
    FeedFilter,
    FeedQuery,
    FeedType,
    HasTag,
    OfType,
    Published,
    SortKey,
    SubscribedBy,
    build_feed_query,
    build_video_feed_query,
    compile_feed_count,
    compile_feed_query,
    compile_predicate,
)

NOW = datetime(2026, 5, 1, 12, 0, tzinfo=UTC)


def test_for_you_is_published_and_recent_first() -> None:
    spec = build_feed_query(FeedFilter(), "viewer", NOW)

    assert spec.predicates == (Published(),)
    assert spec.sort == RECENT_FIRST
    assert (spec.page, spec.limit, spec.offset) == (1, 10, 0)


def test_subscribed_feed_filters_by_viewer() -> None:
    spec = build_feed_query(FeedFilter(feed=FeedType.SUBSCRIBED), "viewer", NOW)

    assert spec.predicates == (Published(), SubscribedBy("viewer"))
    assert spec.sort == RECENT_FIRST


def test_trending_feed_uses_time_window_and_views() -> None:
    spec = build_feed_query(
        FeedFilter(feed=FeedType.TRENDING), None, NOW, trending_window_days=3
    )

    assert spec.predicates == (Published(), CreatedSince(NOW - timedelta(days=3)))
    assert spec.sort == MOST_VIEWED_FIRST
    assert spec.sort[0] == SortKey("view_count")


def test_tag_is_normalized_and_narrows_any_feed() -> None:
    spec = build_feed_query(FeedFilter(feed=FeedType.FOR_YOU, tag="  #Travel "), None, NOW)

    assert spec.predicates == (Published(), HasTag("travel"))


def test_tagged_feed_requires_a_tag() -> None:
    with pytest.raises(ValidationError):
        build_feed_query(FeedFilter(feed=FeedType.TAGGED, tag=" # "), None, NOW)

    spec = build_feed_query(FeedFilter(feed=FeedType.TAGGED, tag="food"), None, NOW)
    assert HasTag("food") in spec.predicates


def test_page_and_limit_are_clamped() -> None:
    spec = build_feed_query(FeedFilter(page=0, limit=10_000), None, NOW)

    assert spec.page == 1
    assert spec.limit == settings.max_page_size


@pytest.mark.parametrize(
    ("total", "page", "limit", "expected"),
    [(0, 1, 10, False), (10, 1, 10, False), (11, 1, 10, True), (25, 2, 10, True), (25, 3, 10, False)],
)
def test_has_next_page(total: int, page: int, limit: int, expected: bool) -> None:
    assert FeedQuery(page=page, limit=limit).has_next_page(total) is expected


def test_video_feed_excludes_the_resumed_item() -> None:
    spec = build_video_feed_query(2, 5, exclude_id="abc")

    assert spec.predicates == (Published(), OfType(ContentType.VIDEO))
    assert spec.exclusions == ("abc",)
    assert spec.offset == 5
    assert build_video_feed_query(1, 5).exclusions == ()


def test_compile_rejects_unknown_predicates() -> None:
    with pytest.raises(TypeError):
        compile_predicate(object())


def test_compiled_query_orders_with_id_tiebreak() -> None:
    spec = build_feed_query(FeedFilter(feed=FeedType.TRENDING), None, NOW).excluding("x")

    sql = str(compile_feed_query(spec))

    assert "content.view_count DESC" in sql
    assert "content.like_count DESC" in sql
    assert "content.id ASC" in sql
    assert "NOT IN" in sql
    assert "count(*)" in str(compile_feed_count(spec)).lower()


def test_exclusions_compile_like_an_explicit_predicate() -> None:
    direct = str(compile_predicate(ExcludeIds(("a", "b"))))
    assert "NOT IN" in direct
