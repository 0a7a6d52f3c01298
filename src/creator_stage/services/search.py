"""Search across users, published content and gigs, with per-user history."""
from __future__ import annotations

import logging

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, selectinload

from creator_stage.db.query import LIKE_ESCAPE, escape_like
from creator_stage.models import Content, Gig, GigStatus, SearchHistory, User
from creator_stage.schemas.search import RecentSearch, SearchResults, SearchType, TrendingSearch
from creator_stage.services.feed import FeedService
from creator_stage.services.gigs import to_gig_response
from creator_stage.services.storage import MediaStorage, get_media_storage
from creator_stage.services.users import to_user_summary

logger = logging.getLogger(__name__)

RECENT_LIMIT = 10
TRENDING_LIMIT = 10
SUGGESTION_LIMIT = 5


class SearchService:
    """Case-insensitive substring search; every query is recorded in history."""

    def __init__(self, db: Session, storage: MediaStorage | None = None) -> None:
        self.db = db
        self.storage = storage or get_media_storage()

    def search(
        self,
        user_id: str,
        query: str,
        type: SearchType = "all",
        page: int = 1,
        limit: int = 20,
    ) -> SearchResults:
        query = query.strip()
        self.db.add(SearchHistory(query=query, user_id=user_id))
        self.db.commit()

        pattern = f"%{escape_like(query.lower())}%"
        skip = (page - 1) * limit
        results = SearchResults()

        if type in ("all", "users"):
            users = self.db.scalars(
                select(User)
                .where(
                    or_(
                        func.lower(User.username).like(pattern, escape=LIKE_ESCAPE),
                        func.lower(User.bio).like(pattern, escape=LIKE_ESCAPE),
                    )
                )
                .order_by(User.username)
                .offset(skip)
                .limit(limit)
            ).all()
            results.users = [to_user_summary(user, self.storage) for user in users]

        if type in ("all", "posts"):
            posts = self.db.scalars(
                select(Content)
                .options(selectinload(Content.creator))
                .where(
                    Content.is_published.is_(True),
                    or_(
                        func.lower(Content.title).like(pattern, escape=LIKE_ESCAPE),
                        func.lower(Content.description).like(pattern, escape=LIKE_ESCAPE),
                    ),
                )
                .order_by(Content.created_at.desc(), Content.id)
                .offset(skip)
                .limit(limit)
            ).all()
            results.posts = FeedService(self.db, self.storage).decorate(posts, user_id)

        if type in ("all", "gigs"):
            gigs = self.db.scalars(
                select(Gig)
                .where(
                    Gig.status != GigStatus.DELETED,
                    or_(
                        func.lower(Gig.title).like(pattern, escape=LIKE_ESCAPE),
                        func.lower(Gig.description).like(pattern, escape=LIKE_ESCAPE),
                    ),
                )
                .order_by(Gig.created_at.desc(), Gig.id)
                .offset(skip)
                .limit(limit)
            ).all()
            results.gigs = [to_gig_response(gig, self.storage) for gig in gigs]

        logger.debug(
            "Search %r (%s) by %s: %d users, %d posts, %d gigs",
            query,
            type,
            user_id,
            len(results.users),
            len(results.posts),
            len(results.gigs),
        )
        return results

    def get_recent_searches(self, user_id: str) -> list[RecentSearch]:
        rows = self.db.scalars(
            select(SearchHistory)
            .where(SearchHistory.user_id == user_id)
            .order_by(SearchHistory.created_at.desc())
            .limit(RECENT_LIMIT)
        ).all()
        return [RecentSearch(id=row.id, query=row.query, created_at=row.created_at) for row in rows]

    def get_trending_searches(self) -> list[TrendingSearch]:
        count = func.count().label("count")
        rows = self.db.execute(
            select(SearchHistory.query, count)
            .group_by(SearchHistory.query)
            .order_by(count.desc(), SearchHistory.query)
            .limit(TRENDING_LIMIT)
        ).all()
        return [TrendingSearch(query=query, count=total) for query, total in rows]

    def get_search_suggestions(self, prefix: str) -> list[str]:
        pattern = f"{escape_like(prefix.strip().lower())}%"
        return list(
            self.db.scalars(
                select(SearchHistory.query)
                .where(func.lower(SearchHistory.query).like(pattern, escape=LIKE_ESCAPE))
                .group_by(SearchHistory.query)
                .order_by(func.count().desc(), SearchHistory.query)
                .limit(SUGGESTION_LIMIT)
            )
        )
