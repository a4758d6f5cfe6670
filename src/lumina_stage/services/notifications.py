"""Notification fan-out and housekeeping."""

from __future__ import annotations

import logging
from datetime import timedelta

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from lumina_stage.core.settings import settings
from lumina_stage.db.time import utcnow
from lumina_stage.models import Follow, Notification
from lumina_stage.models.notification import NOTIFICATION_BLOG_UPLOAD

logger = logging.getLogger(__name__)


def notify(
    db: Session,
    *,
    user_id: int,
    sender_id: int,
    type: str,
    message: str,
    blog_id: int | None = None,
    target_url: str | None = None,
) -> Notification | None:
    """Queue a notification for ``user_id``; the caller commits.

    Users are not notified about their own actions, except for the confirmation
    sent when they publish a blog.
    """
    if user_id == sender_id and type != NOTIFICATION_BLOG_UPLOAD:
        return None
    notification = Notification(
        user_id=user_id,
        sender_id=sender_id,
        type=type,
        message=message,
        blog_id=blog_id,
        target_url=target_url,
    )
    db.add(notification)
    return notification


def notify_followers(
    db: Session,
    *,
    author_id: int,
    type: str,
    message: str,
    blog_id: int | None = None,
    target_url: str | None = None,
) -> int:
    """Queue one notification per follower of ``author_id`` and return how many."""
    follower_ids = db.scalars(
        select(Follow.follower_id).where(Follow.followee_id == author_id)
    ).all()
    db.add_all(
        Notification(
            user_id=follower_id,
            sender_id=author_id,
            type=type,
            message=message,
            blog_id=blog_id,
            target_url=target_url,
        )
        for follower_id in follower_ids
        if follower_id != author_id
    )
    return len(follower_ids)


def unread_count(db: Session, user_id: int) -> int:
    """Return the number of unread notifications for ``user_id``."""
    return db.scalar(
        select(func.count())
        .select_from(Notification)
        .where(Notification.user_id == user_id, Notification.read.is_(False))
    ) or 0


def purge_expired(db: Session, ttl_days: int | None = None) -> int:
    """Delete notifications older than the retention window."""
    days = settings.notification_ttl_days if ttl_days is None else ttl_days
    cutoff = utcnow() - timedelta(days=days)
    result = db.execute(delete(Notification).where(Notification.created_at < cutoff))
    db.commit()
    removed = result.rowcount or 0
    if removed:
        logger.info("Purged %d expired notifications", removed)
    return removed
