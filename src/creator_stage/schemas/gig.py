"""Gig listing schemas."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from creator_stage.models.gig import GigStatus
from creator_stage.schemas.user import UserSummary


def _clean_skills(skills: list[str]) -> list[str]:
    seen: dict[str, None] = {}
    for skill in skills:
        name = skill.strip()
        if name:
            seen.setdefault(name, None)
    return list(seen)


class GigCreate(BaseModel):
    """Schema for publishing a gig."""

    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=1000)
    price: Decimal = Field(..., ge=1, max_digits=10, decimal_places=2)
    skills: list[str] = Field(default_factory=list)
    status: GigStatus = GigStatus.ACTIVE

    @field_validator("skills")
    @classmethod
    def normalize_skills(cls, v: list[str]) -> list[str]:
        return _clean_skills(v)


class GigUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    title: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, min_length=1, max_length=1000)
    price: Decimal | None = Field(None, ge=1, max_digits=10, decimal_places=2)
    skills: list[str] | None = None
    status: GigStatus | None = None

    @field_validator("skills")
    @classmethod
    def normalize_skills(cls, v: list[str] | None) -> list[str] | None:
        return None if v is None else _clean_skills(v)


class GigResponse(BaseModel):
    id: str
    title: str
    description: str
    price: Decimal
    skills: list[str]
    status: GigStatus
    view_count: int
    contact_count: int
    created_at: datetime
    updated_at: datetime
    creator: UserSummary | None = None

    model_config = ConfigDict(from_attributes=True)


class GigList(BaseModel):
    gigs: list[GigResponse]
    total: int
