# src/lumina_stage/models/__init__.py
"""SQLAlchemy models for the Lumina application."""

from .announcement import Announcement
from .blog import Blog, BlogLike, BlogTag
from .comment import Comment, CommentReaction, ReactionSymbol
from .moderation import ModerationLog
from .notification import Notification
from .user import Bookmark, Follow, ReadingHistory, User

__all__ = [
    "Announcement",
    "Blog", "BlogLike", "BlogTag",
    "Comment", "CommentReaction", "ReactionSymbol",
    "ModerationLog",
    "Notification",
    "User", "Follow", "Bookmark", "ReadingHistory",
]
