# src/creator_stage/api/v1/endpoints/gigs.py
"""Gig listing endpoints."""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Query, status

from creator_stage.models import GigStatus
from creator_stage.schemas.common import Page, StatusMessage
from creator_stage.schemas.gig import GigCreate, GigList, GigResponse, GigUpdate
from creator_stage.services.gigs import to_gig_response

from ..dependencies import CurrentUserDep, GigServiceDep, LimitQuery, PageQuery

router = APIRouter(prefix="/gigs", tags=["gigs"])


@router.post("", response_model=GigResponse, status_code=status.HTTP_201_CREATED)
async def create_gig(
    payload: GigCreate, current_user: CurrentUserDep, service: GigServiceDep
) -> GigResponse:
    gig = service.create_gig(current_user.id, payload)
    return to_gig_response(gig, service.storage)


@router.get("", response_model=GigList)
async def list_gigs(
    current_user: CurrentUserDep,
    service: GigServiceDep,
    min_price: Annotated[Decimal | None, Query(alias="minPrice", ge=0)] = None,
    max_price: Annotated[Decimal | None, Query(alias="maxPrice", ge=0)] = None,
    skills: Annotated[list[str] | None, Query()] = None,
) -> GigList:
    """List gigs, optionally by price range and skills (any of)."""
    return service.get_gigs(min_price, max_price, skills)


@router.get("/mine", response_model=Page[GigResponse])
async def my_gigs(
    current_user: CurrentUserDep,
    service: GigServiceDep,
    page: PageQuery = 1,
    limit: LimitQuery = 10,
    gig_status: Annotated[GigStatus | None, Query(alias="status")] = None,
) -> Page[GigResponse]:
    return service.get_user_gigs(current_user.id, page, limit, gig_status)


@router.get("/{gig_id}", response_model=GigResponse)
async def get_gig(gig_id: str, current_user: CurrentUserDep, service: GigServiceDep) -> GigResponse:
    return to_gig_response(service.get_gig(gig_id), service.storage)


@router.put("/{gig_id}", response_model=GigResponse)
async def update_gig(
    gig_id: str,
    payload: GigUpdate,
    current_user: CurrentUserDep,
    service: GigServiceDep,
) -> GigResponse:
    gig = service.update_gig(current_user.id, gig_id, payload)
    return to_gig_response(gig, service.storage)


@router.delete("/{gig_id}", response_model=StatusMessage)
async def delete_gig(
    gig_id: str, current_user: CurrentUserDep, service: GigServiceDep
) -> StatusMessage:
    service.delete_gig(current_user.id, gig_id)
    return StatusMessage(message="Gig deleted successfully")
