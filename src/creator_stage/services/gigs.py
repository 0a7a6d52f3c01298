"""Gig listings."""
from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from creator_stage.models import Gig, GigStatus
from creator_stage.schemas.common import Page, Pagination
from creator_stage.schemas.gig import GigCreate, GigList, GigResponse, GigUpdate
from creator_stage.services.errors import NotFoundError
from creator_stage.services.storage import MediaStorage, get_media_storage
from creator_stage.services.users import to_user_summary

logger = logging.getLogger(__name__)


def to_gig_response(gig: Gig, storage: MediaStorage) -> GigResponse:
    return GigResponse(
        id=gig.id,
        title=gig.title,
        description=gig.description,
        price=gig.price,
        skills=list(gig.skills or []),
        status=gig.status,
        view_count=gig.view_count,
        contact_count=gig.contact_count,
        created_at=gig.created_at,
        updated_at=gig.updated_at,
        creator=to_user_summary(gig.creator, storage) if gig.creator else None,
    )


class GigService:
    def __init__(self, db: Session, storage: MediaStorage | None = None) -> None:
        self.db = db
        self.storage = storage or get_media_storage()

    def create_gig(self, user_id: str, data: GigCreate) -> Gig:
        gig = Gig(creator_id=user_id, **data.model_dump())
        self.db.add(gig)
        self.db.commit()
        logger.info("User %s created gig %s", user_id, gig.id)
        return gig

    def get_gigs(
        self,
        min_price: Decimal | None = None,
        max_price: Decimal | None = None,
        skills: list[str] | None = None,
    ) -> GigList:
        """List gigs within a price range that offer at least one of ``skills``.

        Skills live in a JSON column, so that filter runs after the price query.
        """
        stmt = select(Gig).where(Gig.status != GigStatus.DELETED)
        if min_price is not None:
            stmt = stmt.where(Gig.price >= min_price)
        if max_price is not None:
            stmt = stmt.where(Gig.price <= max_price)
        gigs = list(self.db.scalars(stmt.order_by(Gig.created_at.desc(), Gig.id)).all())

        if skills:
            wanted = {skill.strip().lower() for skill in skills if skill.strip()}
            gigs = [
                gig for gig in gigs if wanted & {skill.lower() for skill in gig.skills or []}
            ]
        return GigList(gigs=[to_gig_response(gig, self.storage) for gig in gigs], total=len(gigs))

    def get_gig(self, gig_id: str) -> Gig:
        gig = self.db.get(Gig, gig_id)
        if gig is None:
            raise NotFoundError("Gig not found")
        return gig

    def _get_owned(self, user_id: str, gig_id: str) -> Gig:
        gig = self.db.scalar(select(Gig).where(Gig.id == gig_id, Gig.creator_id == user_id))
        if gig is None:
            raise NotFoundError("Gig not found or unauthorized")
        return gig

    def update_gig(self, user_id: str, gig_id: str, changes: GigUpdate) -> Gig:
        gig = self._get_owned(user_id, gig_id)
        for field, value in changes.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(gig, field, value)
        self.db.commit()
        self.db.refresh(gig)
        return gig

    def delete_gig(self, user_id: str, gig_id: str) -> None:
        gig = self._get_owned(user_id, gig_id)
        self.db.delete(gig)
        self.db.commit()

    def get_user_gigs(
        self,
        user_id: str,
        page: int = 1,
        limit: int = 10,
        status: GigStatus | None = None,
    ) -> Page[GigResponse]:
        conditions = [Gig.creator_id == user_id]
        if status is not None:
            conditions.append(Gig.status == status)
        total = self.db.scalar(select(func.count()).select_from(Gig).where(*conditions)) or 0
        gigs = self.db.scalars(
            select(Gig)
            .where(*conditions)
            .order_by(Gig.created_at.desc(), Gig.id)
            .offset((page - 1) * limit)
            .limit(limit)
        ).all()
        return Page[GigResponse](
            items=[to_gig_response(gig, self.storage) for gig in gigs],
            pagination=Pagination.build(total, page, limit),
        )
