# src/creator_stage/api/v1/endpoints/auth.py
"""Authentication endpoints for the Creator Stage API."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from creator_stage.core.security import create_access_token
from creator_stage.schemas.user import LoginRequest, RegisterRequest, TokenResponse

from ..dependencies import UserServiceDep

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, users: UserServiceDep) -> TokenResponse:
    """Create an account and return an access token for it."""
    user = users.create_user(payload.username, payload.email, payload.password)
    return TokenResponse(access_token=create_access_token(user.id), user_id=user.id)


@router.post("/login", response_model=TokenResponse)
async def login(payload: LoginRequest, users: UserServiceDep) -> TokenResponse:
    """Exchange a username (or email) and password for an access token."""
    user = users.authenticate(payload.identifier, payload.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )
    return TokenResponse(access_token=create_access_token(user.id), user_id=user.id)
