"""Account administration helpers."""

from __future__ import annotations

import logging

from sqlalchemy import delete, or_, select, update
from sqlalchemy.orm import Session

from lumina_stage.models import (
    BlogLike,
    Bookmark,
    Comment,
    CommentReaction,
    Follow,
    ModerationLog,
    Notification,
    ReadingHistory,
    User,
)
from lumina_stage.models.user import ROLE_ADMIN, ROLE_USER
from lumina_stage.services import blogs as blog_service

logger = logging.getLogger(__name__)


def toggle_role(db: Session, user: User) -> str:
    """Flip a user between USER and ADMIN and return the new role."""
    user.role = ROLE_USER if user.role == ROLE_ADMIN else ROLE_ADMIN
    db.commit()
    logger.info("User %s is now %s", user.id, user.role)
    return user.role


def delete_user(db: Session, user: User) -> None:
    """Delete an account together with its content and relationships.

    Replies that other users wrote under this user's comments are kept; their
    parent is gone, so threads show them as top-level comments.
    """
    user_id = user.id
    for blog in list(user.blogs):
        blog_service.delete_blog(db, blog)

    own_comments = select(Comment.id).where(Comment.author_id == user_id)
    db.execute(delete(CommentReaction).where(CommentReaction.comment_id.in_(own_comments)))
    db.execute(delete(Comment).where(Comment.author_id == user_id))
    db.execute(delete(CommentReaction).where(CommentReaction.user_id == user_id))
    db.execute(delete(BlogLike).where(BlogLike.user_id == user_id))
    db.execute(delete(Bookmark).where(Bookmark.user_id == user_id))
    db.execute(delete(ReadingHistory).where(ReadingHistory.user_id == user_id))
    db.execute(
        delete(Follow).where(or_(Follow.follower_id == user_id, Follow.followee_id == user_id))
    )
    db.execute(
        delete(Notification).where(
            or_(Notification.user_id == user_id, Notification.sender_id == user_id)
        )
    )
    db.execute(
        update(ModerationLog).where(ModerationLog.user_id == user_id).values(user_id=None)
    )
    db.expire(user)
    db.delete(user)
    db.commit()
    logger.info("Deleted user %s", user_id)
