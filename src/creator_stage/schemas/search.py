"""Search schemas."""
from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from creator_stage.schemas.content import FeedItem
from creator_stage.schemas.gig import GigResponse
from creator_stage.schemas.user import UserSummary

SearchType = Literal["all", "users", "posts", "gigs"]


class SearchResults(BaseModel):
    users: list[UserSummary] = []
    posts: list[FeedItem] = []
    gigs: list[GigResponse] = []


class RecentSearch(BaseModel):
    id: str
    query: str
    created_at: datetime


class TrendingSearch(BaseModel):
    query: str
    count: int
