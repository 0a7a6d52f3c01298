"""Tests for content upload, feeds and subscriptions over HTTP."""

from fastapi import status

from creator_stage.models import ContentType


def _upload_image(client, headers, title="Harbour", tags="boats, sea"):
    return client.post(
        "/api/v1/content",
        data={"title": title, "type": "image", "tags": tags},
        files={"media": ("harbour.png", b"\x89PNG-harbour", "image/png")},
        headers=headers,
    )


def test_upload_publish_and_browse(client, auth_token, other_auth_token) -> None:
    created = _upload_image(client, auth_token)

    assert created.status_code == status.HTTP_201_CREATED
    draft = created.json()
    assert draft["is_published"] is False
    assert draft["tags"] == ["boats", "sea"]
    assert draft["media_url"].startswith("http://test/uploads/content/media/")

    empty = client.get("/api/v1/content/community", headers=other_auth_token)
    assert empty.json()["items"] == []

    published = client.post(f"/api/v1/content/{draft['id']}/publish", headers=auth_token)
    assert published.status_code == status.HTTP_200_OK
    assert published.json()["is_published"] is True

    feed = client.get("/api/v1/content/community", headers=other_auth_token).json()
    assert [item["id"] for item in feed["items"]] == [draft["id"]]
    assert feed["items"][0]["creator"]["username"] == "alice"
    assert feed["pagination"] == {"total": 1, "page": 1, "limit": 10, "has_next_page": False}


def test_upload_video_without_thumbnail_is_rejected(client, auth_token) -> None:
    response = client.post(
        "/api/v1/content",
        data={"title": "Clip", "type": "video"},
        files={"media": ("clip.mp4", b"\x00" * 8, "video/mp4")},
        headers=auth_token,
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["kind"] == "validation"


def test_upload_rejects_invalid_metadata(client, auth_token) -> None:
    response = client.post(
        "/api/v1/content",
        data={"title": "", "type": "image"},
        files={"media": ("a.png", b"\x89PNG", "image/png")},
        headers=auth_token,
    )

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_tagged_feed_and_video_feed(
    client, make_content, test_user, other_user, auth_token
) -> None:
    make_content(other_user, "Tagged", tags=["sea"])
    make_content(other_user, "Untagged")
    clip = make_content(other_user, "Clip", type=ContentType.VIDEO)

    tagged = client.get(
        "/api/v1/content/community",
        params={"feed": "tagged", "tag": "#Sea"},
        headers=auth_token,
    ).json()
    videos = client.get(
        "/api/v1/content/feed/videos", params={"initialId": clip.id}, headers=auth_token
    ).json()

    assert [item["title"] for item in tagged["items"]] == ["Tagged"]
    assert [item["id"] for item in videos["items"]] == [clip.id]
    assert videos["items"][0]["thumbnail_url"] == "http://test/uploads/content/thumbnail/poster.png"


def test_drafts_stats_and_details(
    client, make_content, test_user, auth_token, other_auth_token
) -> None:
    draft = make_content(test_user, "Draft", published=False)
    live = make_content(test_user, "Live", view_count=2)

    drafts = client.get("/api/v1/content/drafts", headers=auth_token).json()
    stats = client.get("/api/v1/content/stats", headers=auth_token).json()
    details = client.get(f"/api/v1/content/{live.id}", headers=other_auth_token)
    hidden = client.get(f"/api/v1/content/{draft.id}", headers=other_auth_token)

    assert [item["id"] for item in drafts["images"]] == [draft.id]
    assert drafts["videos"] == []
    assert stats["total_content"] == 2
    assert details.status_code == status.HTTP_200_OK
    assert details.json()["view_count"] == 3
    assert hidden.status_code == status.HTTP_404_NOT_FOUND


def test_delete_content_is_owner_only(
    client, make_content, test_user, auth_token, other_auth_token
) -> None:
    content = make_content(test_user)

    foreign = client.delete(f"/api/v1/content/{content.id}", headers=other_auth_token)
    own = client.delete(f"/api/v1/content/{content.id}", headers=auth_token)

    assert foreign.status_code == status.HTTP_404_NOT_FOUND
    assert own.json() == {"message": "Content deleted successfully"}


def test_subscribe_and_list_subscriptions(client, other_user, auth_token) -> None:
    url = f"/api/v1/content/creators/{other_user.id}/subscribe"

    first = client.post(url, headers=auth_token)
    again = client.post(url, headers=auth_token)
    listed = client.get("/api/v1/content/subscriptions", headers=auth_token).json()
    removed = client.delete(url, headers=auth_token)

    assert first.status_code == status.HTTP_201_CREATED
    assert again.status_code == status.HTTP_409_CONFLICT
    assert [entry["creator"]["username"] for entry in listed] == ["bob"]
    assert removed.json() == {"message": "Successfully unsubscribed from creator"}
