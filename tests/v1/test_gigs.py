"""Tests for gig listings."""

from decimal import Decimal

from fastapi import status


def _create(client, headers, title="Logo design", price=25, skills=("Design",), **extra):
    response = client.post(
        "/api/v1/gigs",
        json={
            "title": title,
            "description": f"{title} for your channel",
            "price": price,
            "skills": list(skills),
            **extra,
        },
        headers=headers,
    )
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()


def test_create_and_fetch_gig(client, auth_token, other_auth_token) -> None:
    gig = _create(client, auth_token, skills=[" Design ", "Design", "Branding"])

    fetched = client.get(f"/api/v1/gigs/{gig['id']}", headers=other_auth_token).json()

    assert Decimal(str(fetched["price"])) == Decimal("25")
    assert fetched["skills"] == ["Design", "Branding"]
    assert fetched["status"] == "active"
    assert fetched["creator"]["username"] == "alice"


def test_price_must_be_positive(client, auth_token) -> None:
    response = client.post(
        "/api/v1/gigs",
        json={"title": "Free", "description": "nothing", "price": 0},
        headers=auth_token,
    )

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_list_filters_by_price_and_skills(client, auth_token) -> None:
    _create(client, auth_token, "Cheap edit", price=10, skills=["Editing"])
    _create(client, auth_token, "Pricey edit", price=200, skills=["editing", "Color"])
    _create(client, auth_token, "Voice over", price=50, skills=["Audio"])

    in_range = client.get(
        "/api/v1/gigs", params={"minPrice": 20, "maxPrice": 300}, headers=auth_token
    ).json()
    by_skill = client.get(
        "/api/v1/gigs", params=[("skills", "EDITING"), ("skills", "audio")], headers=auth_token
    ).json()

    assert {g["title"] for g in in_range["gigs"]} == {"Pricey edit", "Voice over"}
    assert in_range["total"] == 2
    assert by_skill["total"] == 3


def test_update_and_delete_are_owner_only(client, auth_token, other_auth_token) -> None:
    gig = _create(client, auth_token)

    foreign = client.put(
        f"/api/v1/gigs/{gig['id']}", json={"title": "Mine now"}, headers=other_auth_token
    )
    paused = client.put(
        f"/api/v1/gigs/{gig['id']}", json={"status": "paused"}, headers=auth_token
    )
    foreign_delete = client.delete(f"/api/v1/gigs/{gig['id']}", headers=other_auth_token)
    deleted = client.delete(f"/api/v1/gigs/{gig['id']}", headers=auth_token)

    assert foreign.status_code == status.HTTP_404_NOT_FOUND
    assert paused.json()["status"] == "paused"
    assert paused.json()["title"] == "Logo design"
    assert foreign_delete.status_code == status.HTTP_404_NOT_FOUND
    assert deleted.json() == {"message": "Gig deleted successfully"}
    gone = client.get(f"/api/v1/gigs/{gig['id']}", headers=auth_token)
    assert gone.status_code == status.HTTP_404_NOT_FOUND


def test_my_gigs_paginates_and_filters_status(client, auth_token, other_auth_token) -> None:
    _create(client, auth_token, "One")
    _create(client, auth_token, "Two", status="paused")
    _create(client, auth_token, "Three")
    _create(client, other_auth_token, "Not mine")

    first_page = client.get(
        "/api/v1/gigs/mine", params={"limit": 2}, headers=auth_token
    ).json()
    paused = client.get(
        "/api/v1/gigs/mine", params={"status": "paused"}, headers=auth_token
    ).json()

    assert len(first_page["items"]) == 2
    assert first_page["pagination"]["total"] == 3
    assert first_page["pagination"]["has_next_page"] is True
    assert [g["title"] for g in paused["items"]] == ["Two"]
