"""Profile settings for the authenticated user."""
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from creator_stage.core.settings import settings
from creator_stage.models import User
from creator_stage.schemas.user import ProfileUpdateRequest
from creator_stage.services.errors import NotFoundError, ValidationError
from creator_stage.services.storage import (
    ALLOWED_IMAGE_TYPES,
    PROFILE_FOLDER,
    MediaStorage,
    UploadedFile,
    get_media_storage,
)

logger = logging.getLogger(__name__)


class ProfileService:
    def __init__(self, db: Session, storage: MediaStorage | None = None) -> None:
        self.db = db
        self.storage = storage or get_media_storage()

    def _get_user(self, user_id: str) -> User:
        user = self.db.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def update_profile(self, user_id: str, changes: ProfileUpdateRequest) -> User:
        """Apply the provided fields; an empty string clears a field."""
        user = self._get_user(user_id)
        for field, value in changes.model_dump(exclude_unset=True).items():
            setattr(user, field, value or None)
        self.db.commit()
        return user

    def update_profile_image(self, user_id: str, upload: UploadedFile) -> User:
        """Store a new profile image and remove the previous one (best effort)."""
        if upload.content_type not in ALLOWED_IMAGE_TYPES:
            raise ValidationError("Profile image must be an image")
        if upload.size > settings.max_image_bytes:
            raise ValidationError("Image exceeds the maximum upload size")

        user = self._get_user(user_id)
        previous = user.profile_image_path
        user.profile_image_path = self.storage.save(PROFILE_FOLDER, upload)
        self.db.commit()
        if previous:
            self.storage.delete(previous)
        logger.info("User %s changed profile image", user_id)
        return user
