"""Tests for likes and comments over HTTP."""

from fastapi import status


def test_like_toggle_round_trip(client, make_content, other_user, auth_token) -> None:
    content = make_content(other_user, like_count=1)
    url = f"/api/v1/interactions/content/{content.id}/like"

    liked = client.post(url, headers=auth_token).json()
    unliked = client.post(url, headers=auth_token).json()

    assert liked == {"is_liked": True, "like_count": 2}
    assert unliked == {"is_liked": False, "like_count": 1}


def test_like_unknown_content(client, auth_token) -> None:
    response = client.post("/api/v1/interactions/content/missing/like", headers=auth_token)

    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_comment_reply_and_listing(
    client, make_content, other_user, auth_token, other_auth_token
) -> None:
    content = make_content(other_user)
    comments_url = f"/api/v1/interactions/content/{content.id}/comments"

    top = client.post(comments_url, json={"text": "great"}, headers=auth_token)
    assert top.status_code == status.HTTP_201_CREATED
    top_id = top.json()["id"]
    reply = client.post(
        comments_url, json={"text": "thanks!", "parent_id": top_id}, headers=other_auth_token
    ).json()
    client.post(f"/api/v1/interactions/comments/{reply['id']}/like", headers=auth_token)

    listed = client.get(comments_url, headers=auth_token).json()
    replies = client.get(
        f"/api/v1/interactions/comments/{top_id}/replies", headers=auth_token
    ).json()

    assert [c["id"] for c in listed] == [top_id]
    assert listed[0]["user"]["username"] == "alice"
    assert listed[0]["replies"][0]["text"] == "thanks!"
    assert replies[0]["is_liked"] is True
    assert replies[0]["like_count"] == 1


def test_comment_validation(client, make_content, other_user, auth_token) -> None:
    content = make_content(other_user)

    empty = client.post(
        f"/api/v1/interactions/content/{content.id}/comments", json={"text": ""}, headers=auth_token
    )
    bad_parent = client.post(
        f"/api/v1/interactions/content/{content.id}/comments",
        json={"text": "hi", "parent_id": "missing"},
        headers=auth_token,
    )

    assert empty.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert bad_parent.status_code == status.HTTP_404_NOT_FOUND
