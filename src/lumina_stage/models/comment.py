# src/lumina_stage/models/comment.py
"""Models for threaded comments and their reactions."""

from __future__ import annotations

import enum
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lumina_stage.db.session import Base
from lumina_stage.db.time import utcnow

if TYPE_CHECKING:
    from .blog import Blog
    from .user import User

TOMBSTONE_CONTENT = "[This comment was deleted]"


class ReactionSymbol(str, enum.Enum):
    """Reactions a user may attach to a comment."""

    LIKE = "👍"
    LOVE = "❤️"
    LAUGH = "😂"
    WOW = "😮"
    SAD = "😢"
    FIRE = "🔥"


class Comment(Base):
    """A comment on a blog; replies point at their parent comment."""

    __tablename__ = "comment"
    __table_args__ = (
        Index("ix_comment_blog_parent", "blog_id", "parent_id"),
        Index("ix_comment_author_created", "author_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        nullable=False,
    )
    blog_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("blog.id", ondelete="CASCADE"),
        nullable=False,
    )
    # Top-level comments have parent_id = NULL.
    parent_id: Mapped[int | None] = mapped_column(
        BigInteger,
        ForeignKey("comment.id", ondelete="SET NULL"),
        nullable=True,
    )
    depth: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    is_pinned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # Tombstones keep their row so replies stay attached.
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    author: Mapped[User] = relationship("User", lazy="joined")
    blog: Mapped[Blog] = relationship("Blog", back_populates="comments")
    reaction_rows: Mapped[list[CommentReaction]] = relationship(
        "CommentReaction",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    @property
    def reactions(self) -> dict[int, ReactionSymbol]:
        """Return the reaction map keyed by user id."""
        return {row.user_id: row.symbol for row in self.reaction_rows}


class CommentReaction(Base):
    """A single user's reaction on a comment.

    One row per (comment, user); switching reactions updates the row in place.
    """

    __tablename__ = "comment_reaction"

    comment_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("comment.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
    )
    symbol: Mapped[ReactionSymbol] = mapped_column(
        Enum(
            ReactionSymbol,
            native_enum=False,
            length=16,
            values_callable=lambda members: [member.value for member in members],
        ),
        nullable=False,
    )
