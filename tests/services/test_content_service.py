"""Tests for ContentService: uploads, publishing, deletion and subscriptions."""

from pathlib import Path

import pytest
from sqlalchemy import func, select

from creator_stage.models import Comment, Content, ContentType, Like, Notification, Subscription
from creator_stage.schemas.content import ContentCreate
from creator_stage.services import ContentService, InteractionService
from creator_stage.services.errors import ConflictError, NotFoundError, ValidationError
from creator_stage.services.storage import UploadedFile


@pytest.fixture
def contents(db_session, storage):
    return ContentService(db_session, storage)


def _count(db_session, model) -> int:
    return db_session.scalar(select(func.count()).select_from(model))


def test_create_image_draft_stores_file(contents, storage, test_user, image_file) -> None:
    data = ContentCreate(title="Sunrise", type=ContentType.IMAGE, tags="#Morning, sky,morning")

    content = contents.create_content(test_user.id, data, image_file())

    assert content.is_published is False
    assert content.tag_names == ["morning", "sky"]
    assert content.media_path.startswith("uploads/content/media/")
    assert (Path(storage.root) / content.media_path).is_file()


def test_video_requires_thumbnail_and_matching_mime(
    contents, test_user, image_file, video_file
) -> None:
    video = ContentCreate(title="Clip", type=ContentType.VIDEO)
    image = ContentCreate(title="Still", type=ContentType.IMAGE)

    with pytest.raises(ValidationError, match="Thumbnail is required"):
        contents.create_content(test_user.id, video, video_file())
    with pytest.raises(ValidationError, match="Expected video"):
        contents.create_content(test_user.id, video, image_file(), image_file())
    with pytest.raises(ValidationError, match="Expected image"):
        contents.create_content(test_user.id, image, video_file())
    with pytest.raises(ValidationError):
        contents.create_content(
            test_user.id,
            image,
            image_file(),
            UploadedFile(filename="t.txt", content_type="text/plain", data=b"x"),
        )


def test_publish_video_needs_thumbnail(contents, make_content, test_user, image_file) -> None:
    video = make_content(test_user, "Clip", type=ContentType.VIDEO, published=False)
    video.thumbnail_path = None
    contents.db.commit()

    with pytest.raises(ValidationError):
        contents.publish_content(test_user.id, video.id)

    contents.set_thumbnail(test_user.id, video.id, image_file("poster.png"))
    published = contents.publish_content(test_user.id, video.id)

    assert published.is_published is True


def test_publish_is_owner_only(contents, make_content, test_user, other_user) -> None:
    draft = make_content(test_user, published=False)

    with pytest.raises(NotFoundError):
        contents.publish_content(other_user.id, draft.id)


def test_delete_content_removes_rows_and_files(
    contents, storage, test_user, other_user, image_file, db_session
) -> None:
    content = contents.create_content(
        test_user.id, ContentCreate(title="Doomed", type=ContentType.IMAGE), image_file()
    )
    media = Path(storage.root) / content.media_path
    interactions = InteractionService(db_session, storage=storage)
    comment = interactions.add_comment(other_user.id, content.id, "nice")
    interactions.toggle_like(other_user.id, comment_id=comment.id)
    interactions.toggle_like(other_user.id, content_id=content.id)

    contents.delete_content(test_user.id, content.id)

    assert db_session.get(Content, content.id) is None
    assert _count(db_session, Comment) == 0
    assert _count(db_session, Like) == 0
    assert not media.exists()


def test_delete_survives_missing_files(contents, make_content, test_user, db_session) -> None:
    content = make_content(test_user)

    contents.delete_content(test_user.id, content.id)

    assert db_session.get(Content, content.id) is None


def test_drafts_and_stats(contents, make_content, test_user) -> None:
    make_content(test_user, "Draft video", type=ContentType.VIDEO, published=False)
    make_content(test_user, "Draft image", published=False)
    make_content(test_user, "Live", like_count=4, view_count=10, comments_count=2)

    drafts = contents.get_drafts(test_user.id)
    stats = contents.get_content_stats(test_user.id)

    assert [d.title for d in drafts.videos] == ["Draft video"]
    assert [d.title for d in drafts.images] == ["Draft image"]
    assert stats.total_content == 3
    assert stats.video_count == 1
    assert stats.image_count == 2
    assert (stats.total_likes, stats.total_views, stats.total_comments) == (4, 10, 2)
    assert contents.get_content_stats("nobody").total_content == 0


def test_details_count_views_and_hide_foreign_drafts(
    contents, make_content, test_user, other_user
) -> None:
    live = make_content(test_user, "Live")
    draft = make_content(test_user, "Draft", published=False)

    first = contents.get_content_details(live.id, other_user.id)
    second = contents.get_content_details(live.id, other_user.id)

    assert second.view_count == first.view_count + 1
    assert contents.get_content_details(draft.id, test_user.id).id == draft.id
    with pytest.raises(NotFoundError):
        contents.get_content_details(draft.id, other_user.id)


def test_subscribe_lifecycle(contents, test_user, other_user, db_session) -> None:
    contents.subscribe(test_user.id, other_user.id)
    with pytest.raises(ConflictError):
        contents.subscribe(test_user.id, other_user.id)

    contents.unsubscribe(test_user.id, other_user.id)
    with pytest.raises(ValidationError):
        contents.unsubscribe(test_user.id, other_user.id)
    assert contents.get_subscriptions(test_user.id) == []

    contents.subscribe(test_user.id, other_user.id)
    subscriptions = contents.get_subscriptions(test_user.id)

    assert [s.creator.username for s in subscriptions] == ["bob"]
    assert _count(db_session, Subscription) == 1
    follows = db_session.scalars(
        select(Notification).where(Notification.user_id == other_user.id)
    ).all()
    assert [n.title for n in follows] == ["New Subscriber", "New Subscriber"]
    assert follows[0].route == f"/profile/{test_user.id}"


def test_subscribe_rejects_self_and_unknown(contents, test_user) -> None:
    with pytest.raises(ValidationError):
        contents.subscribe(test_user.id, test_user.id)
    with pytest.raises(NotFoundError):
        contents.subscribe(test_user.id, "missing")
