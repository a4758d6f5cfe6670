# src/lumina_stage/main.py
"""Main entry point for the Lumina application."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from sqlalchemy.exc import SQLAlchemyError

from lumina_stage.api.v1 import (
    admin_router,
    ai_router,
    announcements_router,
    auth_router,
    blogs_router,
    comments_router,
    notifications_router,
    users_router,
)
from lumina_stage.core.settings import settings
from lumina_stage.db.session import SessionLocal
from lumina_stage.services.ai import get_ai_client
from lumina_stage.services.notifications import purge_expired

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Lumina API",
    description="Blogging platform with threaded discussion and AI-assisted writing",
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

# Include API routers
app.include_router(auth_router, prefix="/api/v1")
app.include_router(users_router, prefix="/api/v1")
app.include_router(blogs_router, prefix="/api/v1")
app.include_router(comments_router, prefix="/api/v1")
app.include_router(notifications_router, prefix="/api/v1")
app.include_router(announcements_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")
app.include_router(ai_router, prefix="/api/v1")


@app.on_event("startup")
async def on_startup() -> None:
    db = SessionLocal()
    try:
        purge_expired(db)
    except SQLAlchemyError as exc:  # pragma: no cover - the schema may not exist yet
        logger.warning("Skipping notification purge: %s", exc)
        db.rollback()
    finally:
        db.close()


@app.on_event("shutdown")
async def on_shutdown() -> None:
    await get_ai_client().close()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": "Lumina API",
        "version": settings.app_version,
        "description": "Blogging platform with threaded discussion and AI-assisted writing",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("lumina_stage.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
