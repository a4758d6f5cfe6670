# src/lumina_stage/models/user.py
"""SQLAlchemy models for user accounts and per-user relationships."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
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

ROLE_USER = "USER"
ROLE_ADMIN = "ADMIN"

STATUS_ACTIVE = "active"
STATUS_BANNED = "banned"
STATUS_SUSPENDED = "suspended"

DEFAULT_PROFILE_PIC = "/images/default-avatar.png"


class User(Base):
    """Registered account."""

    __tablename__ = "user_account"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    full_name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    # Salted PBKDF2 digest; never serialized.
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    password_salt: Mapped[str] = mapped_column(Text, nullable=False)

    bio: Mapped[str] = mapped_column(Text, nullable=False, default="")
    website: Mapped[str] = mapped_column(Text, nullable=False, default="")
    profile_pic: Mapped[str] = mapped_column(Text, nullable=False, default=DEFAULT_PROFILE_PIC)
    linkedin: Mapped[str] = mapped_column(Text, nullable=False, default="")
    twitter: Mapped[str] = mapped_column(Text, nullable=False, default="")
    github: Mapped[str] = mapped_column(Text, nullable=False, default="")
    instagram: Mapped[str] = mapped_column(Text, nullable=False, default="")

    email_on_comment: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    email_on_follow: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    role: Mapped[str] = mapped_column(Text, nullable=False, default=ROLE_USER)
    status: Mapped[str] = mapped_column(Text, nullable=False, default=STATUS_ACTIVE)

    last_ai_request: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    last_profile_edit: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    blogs: Mapped[list[Blog]] = relationship(
        "Blog",
        back_populates="author",
        cascade="all, delete-orphan",
    )

    @property
    def is_admin(self) -> bool:
        """Return True for administrator accounts."""
        return self.role == ROLE_ADMIN

    @property
    def is_active(self) -> bool:
        """Return True unless the account is banned or suspended."""
        return self.status == STATUS_ACTIVE


class Follow(Base):
    """Directed follow edge between two users."""

    __tablename__ = "follow"
    __table_args__ = (Index("ix_follow_followee_id", "followee_id"),)

    follower_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
    )
    followee_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )


class Bookmark(Base):
    """Blog saved by a user for later reading."""

    __tablename__ = "bookmark"

    user_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
    )
    blog_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("blog.id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )


class ReadingHistory(Base):
    """Most recent view of a blog by a user; drives personalization."""

    __tablename__ = "reading_history"

    # One row per (user, blog); revisiting refreshes viewed_at.
    user_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
    )
    blog_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("blog.id", ondelete="CASCADE"),
        primary_key=True,
    )
    viewed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
