# src/creator_stage/api/v1/endpoints/settings.py
"""Profile settings endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, File, UploadFile

from creator_stage.schemas.user import PrivateUserResponse, ProfileUpdateRequest, UserResponse
from creator_stage.services.users import to_user_response

from ..dependencies import CurrentUserDep, ProfileServiceDep, read_upload

router = APIRouter(prefix="/settings", tags=["settings"])


@router.put("/profile", response_model=PrivateUserResponse)
async def update_profile(
    payload: ProfileUpdateRequest,
    current_user: CurrentUserDep,
    service: ProfileServiceDep,
) -> UserResponse:
    """Update bio, location and website; omitted fields are unchanged."""
    user = service.update_profile(current_user.id, payload)
    return to_user_response(user, service.storage, private=True)


@router.post("/profile-image", response_model=PrivateUserResponse)
async def update_profile_image(
    current_user: CurrentUserDep,
    service: ProfileServiceDep,
    image: Annotated[UploadFile, File()],
) -> UserResponse:
    """Replace the caller's profile image."""
    user = service.update_profile_image(current_user.id, await read_upload(image))
    return to_user_response(user, service.storage, private=True)
