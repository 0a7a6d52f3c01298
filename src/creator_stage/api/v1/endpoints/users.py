# src/creator_stage/api/v1/endpoints/users.py
"""User profile endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query

from creator_stage.schemas.user import PrivateUserResponse, UserResponse, UserSummary
from creator_stage.services.users import to_user_response, to_user_summary

from ..dependencies import CurrentUserDep, StorageDep, UserServiceDep

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=PrivateUserResponse)
async def read_me(current_user: CurrentUserDep, storage: StorageDep) -> UserResponse:
    """Return the authenticated user's own profile."""
    return to_user_response(current_user, storage, private=True)


@router.get("/mentions", response_model=list[UserSummary])
async def mention_suggestions(
    current_user: CurrentUserDep,
    users: UserServiceDep,
    q: Annotated[str, Query(min_length=1, max_length=30)],
    limit: Annotated[int, Query(ge=1, le=20)] = 5,
) -> list[UserSummary]:
    """Autocomplete usernames for ``@`` mentions, excluding the caller."""
    matches = users.get_mention_suggestions(q, exclude=[current_user.id], limit=limit)
    return [to_user_summary(user, users.storage) for user in matches]


@router.get("/{user_id}", response_model=UserResponse)
async def read_user(
    user_id: str,
    current_user: CurrentUserDep,
    users: UserServiceDep,
) -> UserResponse:
    """Return the public profile of any user."""
    return to_user_response(users.get_user(user_id), users.storage)
