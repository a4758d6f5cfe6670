"""Blog helpers shared by the blog, user and admin endpoints."""

from __future__ import annotations

import logging
import math
from datetime import datetime

from sqlalchemy import Select, delete, func, or_, select, update
from sqlalchemy.orm import Session

from lumina_stage.core.settings import settings
from lumina_stage.db.time import as_utc, utcnow
from lumina_stage.models import (
    Blog,
    BlogLike,
    BlogTag,
    Bookmark,
    Comment,
    CommentReaction,
    Notification,
    ReadingHistory,
    User,
)
from lumina_stage.models.blog import BLOG_STATUS_PUBLISHED
from lumina_stage.services.moderation import strip_html

logger = logging.getLogger(__name__)

WORDS_PER_MINUTE = 200
META_DESCRIPTION_CHARS = 150

FEED_ALL = "all"
FEED_TRENDING = "trending"
FEED_FEATURED = "featured"


def plain_text(body: str) -> str:
    """Return the readable text of an HTML body."""
    return strip_html(body or "")


def word_count(body: str) -> int:
    """Count whitespace-separated words after stripping markup."""
    return len(plain_text(body).split())


def read_time(body: str) -> int:
    """Estimated reading time in whole minutes, never less than one."""
    return max(1, math.ceil(word_count(body) / WORDS_PER_MINUTE))


def meta_description(body: str) -> str:
    text = plain_text(body)
    if len(text) > META_DESCRIPTION_CHARS:
        return text[:META_DESCRIPTION_CHARS] + "..."
    return text


def embedding_text(title: str, body: str) -> str:
    """Text sent to the embedding service for a blog."""
    return f"{title}\n\n{plain_text(body)}"


def cooldown_remaining(last: datetime | None, seconds: int, now: datetime | None = None) -> int:
    """Return the whole seconds left before ``last + seconds`` has passed."""
    if last is None or seconds <= 0:
        return 0
    current = now or utcnow()
    elapsed = (current - as_utc(last)).total_seconds()
    if elapsed >= seconds:
        return 0
    return math.ceil(seconds - elapsed)


def last_blog_at(db: Session, author_id: int) -> datetime | None:
    """Creation time of the author's most recent blog."""
    return db.scalar(
        select(Blog.created_at)
        .where(Blog.author_id == author_id)
        .order_by(Blog.created_at.desc())
        .limit(1)
    )


def record_view(db: Session, blog_id: int) -> bool:
    """Atomically increment the view counter; False if the blog does not exist."""
    result = db.execute(
        update(Blog)
        .where(Blog.id == blog_id)
        .values(views=Blog.views + 1)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    return bool(result.rowcount)


def track_reading_history(
    db: Session,
    user_id: int,
    blog_id: int,
    limit: int | None = None,
) -> None:
    """Move ``blog_id`` to the front of the user's history and trim the tail."""
    keep = settings.reading_history_limit if limit is None else limit
    entry = db.get(ReadingHistory, (user_id, blog_id))
    if entry is None:
        db.add(ReadingHistory(user_id=user_id, blog_id=blog_id, viewed_at=utcnow()))
    else:
        entry.viewed_at = utcnow()
    db.flush()

    stale = db.scalars(
        select(ReadingHistory.blog_id)
        .where(ReadingHistory.user_id == user_id)
        .order_by(ReadingHistory.viewed_at.desc())
        .offset(keep)
    ).all()
    if stale:
        db.execute(
            delete(ReadingHistory).where(
                ReadingHistory.user_id == user_id,
                ReadingHistory.blog_id.in_(stale),
            )
        )
    db.commit()


def history_blog_ids(db: Session, user_id: int, limit: int | None = None) -> list[int]:
    """Most recently viewed blog ids, newest first."""
    keep = settings.reading_history_limit if limit is None else limit
    return list(
        db.scalars(
            select(ReadingHistory.blog_id)
            .where(ReadingHistory.user_id == user_id)
            .order_by(ReadingHistory.viewed_at.desc())
            .limit(keep)
        ).all()
    )


def is_bookmarked(db: Session, user_id: int, blog_id: int) -> bool:
    return db.get(Bookmark, (user_id, blog_id)) is not None


def can_view(blog: Blog, viewer: User | None) -> bool:
    """Published blogs are public; others only reach their author and admins."""
    if blog.status == BLOG_STATUS_PUBLISHED:
        return True
    return viewer is not None and (viewer.id == blog.author_id or viewer.is_admin)


def published() -> Select[tuple[Blog]]:
    return select(Blog).where(Blog.status == BLOG_STATUS_PUBLISHED)


def standard_feed_query(
    *,
    search: str | None = None,
    category: str | None = None,
    tag: str | None = None,
) -> Select[tuple[Blog]]:
    """Build the non-personalized home feed query.

    With no filters the least viewed blogs come first, newest breaking ties, so
    fresh posts get exposure.
    """
    query = published()
    order_by = [Blog.views.asc(), Blog.created_at.desc()]

    if search:
        pattern = f"%{search}%"
        query = query.where(or_(Blog.title.ilike(pattern), Blog.body.ilike(pattern)))
        order_by = [Blog.created_at.desc()]

    category = (category or "").strip().lower()
    if category == FEED_TRENDING:
        order_by = [Blog.views.desc(), Blog.created_at.desc()]
    elif category == FEED_FEATURED:
        query = query.where(Blog.featured.is_(True))
        order_by = [Blog.created_at.desc()]
    elif category and category != FEED_ALL:
        query = query.where(Blog.category.ilike(f"%{category}%"))
        order_by = [Blog.created_at.desc()]

    if tag:
        query = query.where(
            Blog.id.in_(select(BlogTag.blog_id).where(BlogTag.tag.ilike(f"%{tag.strip()}%")))
        )

    return query.order_by(*order_by, Blog.id.desc())


def feed_page(
    db: Session,
    page: int,
    category: str | None = None,
    page_size: int | None = None,
) -> tuple[list[Blog], bool]:
    """Return one page of the scrolling feed and whether another page may follow."""
    size = settings.feed_page_size if page_size is None else page_size
    category = (category or FEED_ALL).strip().lower()
    query = published()
    order_by = [Blog.created_at.desc()]
    if category == FEED_TRENDING:
        order_by = [Blog.views.desc()]
    elif category == FEED_FEATURED:
        query = query.where(Blog.featured.is_(True))
    elif category != FEED_ALL:
        query = query.where(Blog.category.ilike(f"%{category}%"))

    offset = (max(page, 1) - 1) * size
    blogs = list(
        db.scalars(query.order_by(*order_by, Blog.id.desc()).offset(offset).limit(size)).all()
    )
    return blogs, len(blogs) == size


def trending(db: Session, limit: int = 3) -> list[Blog]:
    return list(
        db.scalars(published().order_by(Blog.views.desc(), Blog.id.desc()).limit(limit)).all()
    )


def featured(db: Session, limit: int = 5) -> list[Blog]:
    return list(
        db.scalars(
            published()
            .where(Blog.featured.is_(True))
            .order_by(Blog.created_at.desc())
            .limit(limit)
        ).all()
    )


def trending_tags(db: Session, limit: int = 5) -> list[tuple[str, int]]:
    """Most used tags with their usage counts."""
    uses = func.count(BlogTag.blog_id)
    rows = db.execute(
        select(BlogTag.tag, uses)
        .group_by(BlogTag.tag)
        .order_by(uses.desc(), BlogTag.tag.asc())
        .limit(limit)
    ).all()
    return [(tag, count) for tag, count in rows]


def recent_blogs(db: Session, exclude_id: int | None = None, limit: int = 3) -> list[Blog]:
    query = published()
    if exclude_id is not None:
        query = query.where(Blog.id != exclude_id)
    return list(
        db.scalars(query.order_by(Blog.created_at.desc(), Blog.id.desc()).limit(limit)).all()
    )


def delete_blog(db: Session, blog: Blog) -> None:
    """Delete a blog with every row that refers to it."""
    blog_id = blog.id
    comment_ids = select(Comment.id).where(Comment.blog_id == blog_id)
    db.execute(delete(CommentReaction).where(CommentReaction.comment_id.in_(comment_ids)))
    db.execute(delete(Comment).where(Comment.blog_id == blog_id))
    db.execute(delete(BlogLike).where(BlogLike.blog_id == blog_id))
    db.execute(delete(Bookmark).where(Bookmark.blog_id == blog_id))
    db.execute(delete(ReadingHistory).where(ReadingHistory.blog_id == blog_id))
    db.execute(delete(Notification).where(Notification.blog_id == blog_id))
    db.delete(blog)
    db.commit()
    logger.info("Deleted blog %s", blog_id)


def month_buckets(now: datetime, months: int = 12) -> list[tuple[int, int]]:
    """Return ``(year, month)`` pairs for the last ``months`` calendar months, oldest first."""
    year, month = now.year, now.month
    buckets: list[tuple[int, int]] = []
    for _ in range(months):
        buckets.append((year, month))
        month -= 1
        if month == 0:
            month = 12
            year -= 1
    buckets.reverse()
    return buckets


def bucket_index(buckets: list[tuple[int, int]], when: datetime) -> int | None:
    try:
        return buckets.index((when.year, when.month))
    except ValueError:
        return None
