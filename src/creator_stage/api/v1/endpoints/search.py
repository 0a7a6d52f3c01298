# src/creator_stage/api/v1/endpoints/search.py
"""Search endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query

from creator_stage.schemas.search import RecentSearch, SearchResults, SearchType, TrendingSearch

from ..dependencies import CurrentUserDep, PageQuery, SearchServiceDep

router = APIRouter(prefix="/search", tags=["search"])


@router.get("", response_model=SearchResults)
async def search(
    current_user: CurrentUserDep,
    service: SearchServiceDep,
    query: Annotated[str, Query(min_length=1, max_length=200)],
    type: SearchType = "all",
    page: PageQuery = 1,
    limit: Annotated[int, Query(ge=1, le=50)] = 20,
) -> SearchResults:
    """Search users, published posts and gigs; the query is saved to history."""
    return service.search(current_user.id, query, type, page, limit)


@router.get("/recent", response_model=list[RecentSearch])
async def recent(current_user: CurrentUserDep, service: SearchServiceDep) -> list[RecentSearch]:
    return service.get_recent_searches(current_user.id)


@router.get("/trending", response_model=list[TrendingSearch])
async def trending(current_user: CurrentUserDep, service: SearchServiceDep) -> list[TrendingSearch]:
    return service.get_trending_searches()


@router.get("/suggestions", response_model=list[str])
async def suggestions(
    current_user: CurrentUserDep,
    service: SearchServiceDep,
    query: Annotated[str, Query(min_length=1, max_length=200)],
) -> list[str]:
    return service.get_search_suggestions(query)
