# src/lumina_stage/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .admin import router as admin_router
from .ai import router as ai_router
from .announcements import router as announcements_router
from .auth import router as auth_router
from .blogs import router as blogs_router
from .comments import router as comments_router
from .notifications import router as notifications_router
from .users import router as users_router

__all__ = [
    "admin_router",
    "ai_router",
    "announcements_router",
    "auth_router",
    "blogs_router",
    "comments_router",
    "notifications_router",
    "users_router",
]
