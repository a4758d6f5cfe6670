# src/lumina_stage/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .announcement import AnnouncementCreate, AnnouncementResponse
from .blog import BlogCard, BlogCreate, BlogDetailResponse, BlogResponse, BlogUpdate
from .comment import CommentCreate, CommentResponse
from .notification import NotificationResponse
from .user import SigninRequest, SignupRequest, TokenResponse, UserResponse

__all__ = [
    "AnnouncementCreate", "AnnouncementResponse",
    "BlogCard", "BlogCreate", "BlogDetailResponse", "BlogResponse", "BlogUpdate",
    "CommentCreate", "CommentResponse",
    "NotificationResponse",
    "SigninRequest", "SignupRequest", "TokenResponse", "UserResponse",
]
