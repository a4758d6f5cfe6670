# src/lumina_stage/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    admin_router,
    ai_router,
    announcements_router,
    auth_router,
    blogs_router,
    comments_router,
    notifications_router,
    users_router,
)

__all__ = [
    "auth_router",
    "blogs_router",
    "comments_router",
    "users_router",
    "notifications_router",
    "announcements_router",
    "admin_router",
    "ai_router",
]
