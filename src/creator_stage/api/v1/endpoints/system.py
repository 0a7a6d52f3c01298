"""System and transparency endpoints for Creator Stage API."""

from __future__ import annotations

import time

from fastapi import APIRouter
from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError

from creator_stage.core.settings import settings
from creator_stage.models import Comment, Content, Gig, Like, Message, User

from ..dependencies import RealtimeDep, SessionDep

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/config")
async def get_public_config() -> dict[str, object]:
    """Return a sanitized snapshot of public runtime configuration.

    Excludes secrets and connection strings; suitable for client bootstrapping.

    Returns:
        Dictionary with app metadata, upload limits, feed paging and realtime
        buffer settings
    """
    return {
        "app": {
            "name": settings.app_name,
            "version": settings.app_version,
            "jwt_algorithm": settings.jwt_algorithm,
            "access_token_expire_minutes": settings.access_token_expire_minutes,
            "debug": settings.debug,
        },
        "uploads": {
            "max_image_bytes": settings.max_image_bytes,
            "max_video_bytes": settings.max_video_bytes,
            "max_thumbnail_bytes": settings.max_thumbnail_bytes,
        },
        "feed": {
            "default_page_size": settings.default_page_size,
            "max_page_size": settings.max_page_size,
            "trending_window_days": settings.trending_window_days,
        },
        "realtime": {"queue_size": settings.realtime_queue_size},
    }


@router.get("/activity-stats")
async def get_activity_stats(db: SessionDep) -> dict[str, int]:
    """Network-wide activity counters.

    Args:
        db: Database session

    Returns:
        Dictionary with counts of users, content, comments, likes, messages and gigs
    """
    counts = {}
    for name, model in (
        ("users", User),
        ("content", Content),
        ("comments", Comment),
        ("likes", Like),
        ("messages", Message),
        ("gigs", Gig),
    ):
        counts[name] = int(db.scalar(select(func.count()).select_from(model)) or 0)
    return counts


@router.get("/health")
async def get_system_health(db: SessionDep, realtime: RealtimeDep) -> dict[str, object]:
    """Health check covering the database and the realtime relays.

    Args:
        db: Database session
        realtime: Process-wide realtime runtime

    Returns:
        Dictionary with overall status, component health and live connection counts
    """
    try:
        db.execute(text("SELECT 1"))
        db_status = "healthy"
    except SQLAlchemyError as exc:
        db_status = f"unhealthy: {exc}"

    return {
        "status": "healthy" if db_status == "healthy" else "unhealthy",
        "timestamp": int(time.time()),
        "components": {
            "database": db_status,
            "realtime": {
                "chat_users": len(realtime.chat.users),
                "notification_users": len(realtime.notifications.users),
            },
        },
        "version": settings.app_version,
    }
