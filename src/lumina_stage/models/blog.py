# src/lumina_stage/models/blog.py
"""SQLAlchemy models for blog posts and related attributes."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Text,
)
from sqlalchemy.orm import Mapped, deferred, mapped_column, relationship

from lumina_stage.db.session import Base
from lumina_stage.db.time import utcnow

if TYPE_CHECKING:
    from .comment import Comment
    from .user import User

BLOG_STATUS_DRAFT = "draft"
BLOG_STATUS_PUBLISHED = "published"
BLOG_STATUS_PRIVATE = "private"


class Blog(Base):
    """Primary content entity produced by users."""

    __tablename__ = "blog"
    __table_args__ = (
        Index("ix_blog_created_at", "created_at"),
        Index("ix_blog_views", "views"),
        Index("ix_blog_category", "category"),
        Index("ix_blog_author_id", "author_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    # Sanitized HTML produced by the editor.
    body: Mapped[str] = mapped_column(Text, nullable=False)
    cover_image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(Text, nullable=False, default=BLOG_STATUS_PUBLISHED)
    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    likes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    author_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Filled in asynchronously after creation; NULL until the embedding service answers.
    embedding: Mapped[list[float] | None] = deferred(
        mapped_column(JSON(none_as_null=True), nullable=True)
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    # Set explicitly on author edits; counter updates leave it alone.
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    author: Mapped[User] = relationship("User", back_populates="blogs", lazy="joined")
    tag_links: Mapped[list[BlogTag]] = relationship(
        "BlogTag",
        cascade="all, delete-orphan",
        order_by="BlogTag.position",
        lazy="selectin",
    )
    comments: Mapped[list[Comment]] = relationship(
        "Comment",
        back_populates="blog",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    like_rows: Mapped[list[BlogLike]] = relationship(
        "BlogLike",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def tags(self) -> list[str]:
        """Return tag names in their submitted order."""
        return [link.tag for link in self.tag_links]

    def set_tags(self, tags: list[str]) -> None:
        """Replace the blog's tags, dropping blanks and duplicates."""
        seen: list[str] = []
        for tag in tags:
            cleaned = tag.strip()
            if cleaned and cleaned not in seen:
                seen.append(cleaned)
        self.tag_links = [BlogTag(tag=tag, position=index) for index, tag in enumerate(seen)]


class BlogTag(Base):
    """Tag attached to a blog."""

    __tablename__ = "blog_tag"
    __table_args__ = (Index("ix_blog_tag_tag", "tag"),)

    blog_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("blog.id", ondelete="CASCADE"),
        primary_key=True,
    )
    tag: Mapped[str] = mapped_column(Text, primary_key=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class BlogLike(Base):
    """Per-user like on a blog.

    The composite primary key prevents duplicate likes from the same user.
    """

    __tablename__ = "blog_like"

    blog_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("blog.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
    )
