"""Embedding-based recommendations: the personalized home feed and related posts."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from lumina_stage.core.settings import settings
from lumina_stage.db.time import utcnow
from lumina_stage.models import Blog
from lumina_stage.models.blog import BLOG_STATUS_PUBLISHED
from lumina_stage.services import blogs as blog_service
from lumina_stage.services.ranking import centroid, has_vector, rank

logger = logging.getLogger(__name__)


@dataclass
class ScoredBlog:
    """A hydrated blog with the similarity score that placed it."""

    blog: Blog
    score: float


def load_user_vector(db: Session, user_id: int) -> list[float] | None:
    """Average the embeddings of the user's recent reading history.

    Returns None when none of the viewed blogs has an embedding yet.
    """
    history_ids = blog_service.history_blog_ids(db, user_id)
    if not history_ids:
        return None
    rows = db.execute(select(Blog.embedding).where(Blog.id.in_(history_ids))).all()
    vectors = [embedding for (embedding,) in rows if has_vector(embedding)]
    if not vectors:
        return None
    # Mixed dimensions can only come from a model change; average the dominant size.
    dim = len(vectors[0])
    vectors = [vector for vector in vectors if len(vector) == dim]
    return centroid(vectors)


def _hydrate(db: Session, ranked_ids: list[tuple[int, float]]) -> list[ScoredBlog]:
    if not ranked_ids:
        return []
    blogs = {
        blog.id: blog
        for blog in db.scalars(select(Blog).where(Blog.id.in_([key for key, _ in ranked_ids])))
    }
    return [ScoredBlog(blogs[key], score) for key, score in ranked_ids if key in blogs]


def personalized_feed(
    db: Session,
    user_id: int,
    k: int | None = None,
    window_days: int | None = None,
) -> list[ScoredBlog]:
    """Rank recent blogs against the user's reading profile.

    Stage one reads only ids and embeddings for blogs inside the candidate
    window; stage two loads full rows for the winners. An empty result means
    the caller should fall back to the standard ordering.
    """
    top_k = settings.personalized_feed_size if k is None else k
    days = settings.feed_candidate_window_days if window_days is None else window_days

    query_vector = load_user_vector(db, user_id)
    if query_vector is None:
        return []

    since = utcnow() - timedelta(days=days)
    candidates = db.execute(
        select(Blog.id, Blog.embedding)
        .where(
            Blog.created_at >= since,
            Blog.status == BLOG_STATUS_PUBLISHED,
            Blog.embedding.is_not(None),
        )
        .order_by(Blog.id)
    ).all()
    scored = rank(
        query_vector,
        ((blog_id, embedding) for blog_id, embedding in candidates if has_vector(embedding)),
        top_k,
    )
    return _hydrate(db, [(item.key, item.score) for item in scored])  # type: ignore[misc]


def related_blogs(db: Session, blog: Blog, k: int | None = None) -> list[ScoredBlog]:
    """Blogs most similar to ``blog``; the newest other blogs when it has no embedding."""
    top_k = settings.related_blogs_count if k is None else k
    if not has_vector(blog.embedding):
        return [ScoredBlog(other, 0.0) for other in blog_service.recent_blogs(db, blog.id, top_k)]

    candidates = db.execute(
        select(Blog.id, Blog.embedding)
        .where(
            Blog.id != blog.id,
            Blog.status == BLOG_STATUS_PUBLISHED,
            Blog.embedding.is_not(None),
        )
        .order_by(Blog.id)
    ).all()
    scored = rank(
        blog.embedding,  # type: ignore[arg-type]
        ((blog_id, embedding) for blog_id, embedding in candidates if has_vector(embedding)),
        top_k,
    )
    return _hydrate(db, [(item.key, item.score) for item in scored])  # type: ignore[misc]
