"""Tests for FeedService against a real (SQLite) database."""

from datetime import UTC, datetime, timedelta

import pytest

from creator_stage.models import ContentType, Like, Subscription, like_target_key
from creator_stage.services import FeedService
from creator_stage.services.errors import ValidationError
from creator_stage.services.feed_query import FeedFilter, FeedType

NOW = datetime(2026, 5, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def feeds(db_session, storage):
    return FeedService(db_session, storage)


def test_for_you_lists_only_published_newest_first(feeds, make_content, test_user) -> None:
    older = make_content(test_user, "Older", created_at=NOW - timedelta(hours=2))
    newer = make_content(test_user, "Newer", created_at=NOW - timedelta(hours=1))
    make_content(test_user, "Draft", published=False, created_at=NOW)

    page = feeds.get_community_content(FeedFilter(), test_user.id, now=NOW)

    assert [item.id for item in page.items] == [newer.id, older.id]
    assert page.pagination.total == 2
    assert page.pagination.has_next_page is False
    assert page.items[0].creator.username == "alice"
    assert page.items[0].media_url == "http://test/uploads/content/media/newer.bin"


def test_pagination_reports_next_page(feeds, make_content, test_user) -> None:
    for index in range(3):
        make_content(test_user, f"Item {index}", created_at=NOW - timedelta(minutes=index))

    first = feeds.get_community_content(FeedFilter(limit=2), None, now=NOW)
    second = feeds.get_community_content(FeedFilter(page=2, limit=2), None, now=NOW)

    assert first.pagination.has_next_page is True
    assert second.pagination.has_next_page is False
    assert {i.id for i in first.items}.isdisjoint({i.id for i in second.items})
    assert len(first.items) + len(second.items) == 3


def test_subscribed_feed_and_viewer_flags(
    feeds, make_content, make_user, test_user, other_user, db_session
) -> None:
    carol = make_user("carol")
    followed = make_content(other_user, "Followed", created_at=NOW - timedelta(minutes=1))
    make_content(carol, "Not followed", created_at=NOW)
    db_session.add(Subscription(subscriber_id=test_user.id, creator_id=other_user.id))
    db_session.add(
        Like(
            user_id=test_user.id,
            content_id=followed.id,
            target_key=like_target_key(content_id=followed.id),
        )
    )
    db_session.commit()

    page = feeds.get_community_content(
        FeedFilter(feed=FeedType.SUBSCRIBED), test_user.id, now=NOW
    )

    assert [item.id for item in page.items] == [followed.id]
    assert page.items[0].is_subscribed is True
    assert page.items[0].is_liked is True


def test_inactive_subscription_is_not_followed(
    feeds, make_content, test_user, other_user, db_session
) -> None:
    make_content(other_user, "Post")
    db_session.add(
        Subscription(subscriber_id=test_user.id, creator_id=other_user.id, is_active=False)
    )
    db_session.commit()

    page = feeds.get_community_content(FeedFilter(feed=FeedType.SUBSCRIBED), test_user.id)

    assert page.items == []


def test_trending_ranks_by_views_inside_window(feeds, make_content, test_user) -> None:
    popular = make_content(test_user, "Popular", view_count=50, created_at=NOW - timedelta(days=1))
    quiet = make_content(test_user, "Quiet", view_count=2, created_at=NOW - timedelta(hours=1))
    make_content(test_user, "Ancient", view_count=999, created_at=NOW - timedelta(days=30))

    page = feeds.get_community_content(FeedFilter(feed=FeedType.TRENDING), None, now=NOW)

    assert [item.id for item in page.items] == [popular.id, quiet.id]


def test_tagged_feed(feeds, make_content, test_user) -> None:
    tagged = make_content(test_user, "Beach", tags=["travel", "summer"])
    make_content(test_user, "Desk", tags=["work"])

    page = feeds.get_community_content(FeedFilter(feed=FeedType.TAGGED, tag="#Travel"), None)

    assert [item.id for item in page.items] == [tagged.id]
    assert page.items[0].tags == ["travel", "summer"]

    with pytest.raises(ValidationError):
        feeds.get_community_content(FeedFilter(feed=FeedType.TAGGED), None)


def test_orphaned_content_has_empty_creator(feeds, make_content) -> None:
    make_content(None, "Orphan")

    page = feeds.get_community_content(FeedFilter(), None)

    assert page.items[0].creator.id is None
    assert page.items[0].creator.username is None


def test_video_feed_prepends_initial_video_once(feeds, make_content, test_user) -> None:
    first = make_content(test_user, "V1", type=ContentType.VIDEO, created_at=NOW)
    second = make_content(
        test_user, "V2", type=ContentType.VIDEO, created_at=NOW - timedelta(minutes=1)
    )
    third = make_content(
        test_user, "V3", type=ContentType.VIDEO, created_at=NOW - timedelta(minutes=2)
    )
    make_content(test_user, "Picture", type=ContentType.IMAGE, created_at=NOW)

    page = feeds.get_feed_videos(third.id, None, page=1, limit=10)

    assert [item.id for item in page.items] == [third.id, first.id, second.id]
    assert page.pagination.total == 2


def test_video_feed_ignores_unknown_initial_id(feeds, make_content, test_user) -> None:
    video = make_content(test_user, "V1", type=ContentType.VIDEO)
    picture = make_content(test_user, "Picture", type=ContentType.IMAGE)

    page = feeds.get_feed_videos(picture.id, None)

    assert [item.id for item in page.items] == [video.id]


def test_video_feed_blurs_verified_creators_for_non_subscribers(
    feeds, make_content, make_user, test_user, db_session
) -> None:
    star = make_user("star", is_verified=True)
    fan = make_user("fan")
    make_content(star, "Exclusive", type=ContentType.VIDEO)
    db_session.add(Subscription(subscriber_id=fan.id, creator_id=star.id))
    db_session.commit()

    stranger_view = feeds.get_feed_videos(None, test_user.id)
    fan_view = feeds.get_feed_videos(None, fan.id)

    assert stranger_view.items[0].is_blurred is True
    assert fan_view.items[0].is_blurred is False
    assert fan_view.items[0].is_subscribed is True
