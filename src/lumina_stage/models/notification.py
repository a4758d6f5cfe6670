# src/lumina_stage/models/notification.py
"""Notification records delivered to users."""

from datetime import datetime

from sqlalchemy import BigInteger, Boolean, DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lumina_stage.db.session import Base
from lumina_stage.db.time import utcnow

from .user import User

NOTIFICATION_LIKE = "like"
NOTIFICATION_COMMENT = "comment"
NOTIFICATION_FOLLOW = "follow"
NOTIFICATION_BLOG_UPLOAD = "blog_upload"
NOTIFICATION_REPLY = "reply"

NOTIFICATION_TYPES = (
    NOTIFICATION_LIKE,
    NOTIFICATION_COMMENT,
    NOTIFICATION_FOLLOW,
    NOTIFICATION_BLOG_UPLOAD,
    NOTIFICATION_REPLY,
)


class Notification(Base):
    """Something that happened which the recipient should hear about."""

    __tablename__ = "notification"
    __table_args__ = (
        Index("ix_notification_user_read", "user_id", "read"),
        Index("ix_notification_user_created", "user_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Receiver.
    user_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        nullable=False,
    )
    # Who performed the action.
    sender_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        nullable=False,
    )
    type: Mapped[str] = mapped_column(Text, nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    blog_id: Mapped[int | None] = mapped_column(
        BigInteger,
        ForeignKey("blog.id", ondelete="CASCADE"),
        nullable=True,
    )
    target_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    sender: Mapped[User] = relationship("User", foreign_keys=[sender_id], lazy="joined")
