# src/creator_stage/main.py
"""Main entry point for the Creator Stage application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from creator_stage.api.v1 import (
    auth_router,
    chat_router,
    content_router,
    gigs_router,
    interactions_router,
    notifications_router,
    realtime_router,
    search_router,
    settings_router,
    system_router,
    users_router,
)
from creator_stage.core.settings import settings
from creator_stage.realtime import get_realtime, reset_realtime
from creator_stage.services.errors import ServiceError

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Creator Stage API",
    description="Creator content, community feed, chat and notifications API",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Render service-layer failures as ``{"detail", "kind"}`` with their status."""
    logger.info("%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.kind)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Include API routers
app.include_router(auth_router, prefix="/api/v1")
app.include_router(users_router, prefix="/api/v1")
app.include_router(content_router, prefix="/api/v1")
app.include_router(interactions_router, prefix="/api/v1")
app.include_router(chat_router, prefix="/api/v1")
app.include_router(notifications_router, prefix="/api/v1")
app.include_router(search_router, prefix="/api/v1")
app.include_router(settings_router, prefix="/api/v1")
app.include_router(gigs_router, prefix="/api/v1")
app.include_router(system_router, prefix="/api/v1")
app.include_router(realtime_router)

# Uploaded media; public URLs point here
app.mount(
    "/uploads",
    StaticFiles(directory=settings.upload_root / "uploads", check_dir=False),
    name="uploads",
)


@app.on_event("startup")
async def on_startup() -> None:
    app.state.realtime = get_realtime()


@app.on_event("shutdown")
async def on_shutdown() -> None:
    reset_realtime()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": "Creator Stage API",
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("creator_stage.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
