"""User account services and user presentation helpers."""
from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from creator_stage.core.security import hash_password, verify_password
from creator_stage.db.query import LIKE_ESCAPE, escape_like
from creator_stage.models import User
from creator_stage.schemas.content import CreatorSummary
from creator_stage.schemas.user import USERNAME_PATTERN, PrivateUserResponse, UserResponse, UserSummary
from creator_stage.services.errors import ConflictError, NotFoundError, ValidationError
from creator_stage.services.storage import PROFILE_FOLDER, MediaStorage, get_media_storage

logger = logging.getLogger(__name__)


def to_user_summary(user: User, storage: MediaStorage) -> UserSummary:
    return UserSummary(
        id=user.id,
        username=user.username,
        profile_image_url=storage.public_url(user.profile_image_path, PROFILE_FOLDER),
        is_verified=user.is_verified,
    )


def to_creator_summary(user: User | None, storage: MediaStorage) -> CreatorSummary:
    """Creator card for content; a missing creator yields an empty card."""
    if user is None:
        return CreatorSummary()
    return CreatorSummary(
        id=user.id,
        username=user.username,
        profile_image_url=storage.public_url(user.profile_image_path, PROFILE_FOLDER),
        is_verified=bool(user.is_verified),
    )


def to_user_response(user: User, storage: MediaStorage, *, private: bool = False) -> UserResponse:
    fields = {
        "id": user.id,
        "username": user.username,
        "bio": user.bio,
        "location": user.location,
        "website": user.website,
        "profile_image_url": storage.public_url(user.profile_image_path, PROFILE_FOLDER),
        "is_verified": user.is_verified,
        "account_type": user.account_type,
        "created_at": user.created_at,
    }
    if private:
        return PrivateUserResponse(email=user.email, **fields)
    return UserResponse(**fields)


class UserService:
    """Account creation, lookup and credential checks."""

    def __init__(self, db: Session, storage: MediaStorage | None = None) -> None:
        self.db = db
        self.storage = storage or get_media_storage()

    def create_user(self, username: str, email: str, password: str) -> User:
        """Register a new account.

        Args:
            username: Public handle, unique and matching the username rules.
            email: Login email, unique (stored lowercase).
            password: Plain password; only its hash is stored.

        Returns:
            The persisted user.

        Raises:
            ValidationError: If the username does not match the allowed pattern.
            ConflictError: If the username or email is already taken.
        """
        if not USERNAME_PATTERN.match(username):
            raise ValidationError("Invalid username")

        email = email.lower()
        existing = self.db.scalar(
            select(User.id).where(or_(User.username == username, User.email == email))
        )
        if existing is not None:
            raise ConflictError("Username or email already exists")

        user = User(username=username, email=email, password_hash=hash_password(password))
        try:
            with self.db.begin_nested():
                self.db.add(user)
        except IntegrityError as err:
            raise ConflictError("Username or email already exists") from err
        self.db.commit()
        logger.info("Registered user %s", user.id)
        return user

    def authenticate(self, identifier: str, password: str) -> User | None:
        """Return the user matching ``identifier`` (username or email) and ``password``."""
        user = self.db.scalar(
            select(User).where(or_(User.username == identifier, User.email == identifier.lower()))
        )
        if user is None or not verify_password(password, user.password_hash):
            return None
        return user

    def get_user(self, user_id: str) -> User:
        user = self.db.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def find_by_usernames(self, usernames: Iterable[str]) -> Sequence[User]:
        names = list(dict.fromkeys(usernames))
        if not names:
            return []
        return self.db.scalars(select(User).where(User.username.in_(names))).all()

    def get_mention_suggestions(
        self,
        query: str,
        exclude: Iterable[str] = (),
        limit: int = 5,
    ) -> Sequence[User]:
        """Users whose username starts with ``query`` (case-insensitive)."""
        stmt = select(User).where(func.lower(User.username).like(
            f"{escape_like(query.lower())}%", escape=LIKE_ESCAPE
        ))
        excluded = list(exclude)
        if excluded:
            stmt = stmt.where(User.id.not_in(excluded))
        return self.db.scalars(stmt.order_by(User.username).limit(limit)).all()
