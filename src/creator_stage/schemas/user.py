"""User-related Pydantic schemas."""

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

USERNAME_PATTERN = re.compile(r"^[A-Za-z][\w.]{2,29}$")


class RegisterRequest(BaseModel):
    """Schema for creating an account."""

    username: str = Field(..., min_length=3, max_length=30, description="Public handle")
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=8, max_length=128)

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        """Usernames start with a letter and contain letters, digits, _ or dots."""
        if not USERNAME_PATTERN.match(v):
            raise ValueError(
                "Username must start with a letter and contain only letters, digits, "
                "underscores or dots"
            )
        return v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        if "@" not in v or v.startswith("@") or v.endswith("@"):
            raise ValueError("Invalid email address")
        return v.lower()


class LoginRequest(BaseModel):
    """Schema for login submissions; ``identifier`` is a username or an email."""

    identifier: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    """Response returned after successful register or login."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field("bearer", description="Token type")
    user_id: str


class UserSummary(BaseModel):
    """Compact user card embedded in feeds, comments and conversations."""

    id: str
    username: str
    profile_image_url: str | None = None
    is_verified: bool = False


class UserResponse(BaseModel):
    """Public profile of a user."""

    id: str
    username: str
    bio: str | None = None
    location: str | None = None
    website: str | None = None
    profile_image_url: str | None = None
    is_verified: bool
    account_type: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PrivateUserResponse(UserResponse):
    """Profile of the authenticated user, including private fields."""

    email: str


class ProfileUpdateRequest(BaseModel):
    """Schema for updating user profile information."""

    bio: str | None = Field(None, max_length=160)
    location: str | None = Field(None, max_length=100)
    website: str | None = Field(None, max_length=100)

    @field_validator("website")
    @classmethod
    def validate_website(cls, v: str | None) -> str | None:
        """Validate the website looks like an http(s) URL."""
        if v is None or v == "":
            return v
        if not re.match(r"^https?://\S+$", v):
            raise ValueError("Website must be an http(s) URL")
        return v
