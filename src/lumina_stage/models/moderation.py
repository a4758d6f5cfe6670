# src/lumina_stage/models/moderation.py
"""Audit log of content rejected by moderation."""

from datetime import datetime

from sqlalchemy import JSON, BigInteger, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from lumina_stage.db.session import Base
from lumina_stage.db.time import utcnow

MODERATION_ACTION_BLOCKED = "BLOCKED"
MODERATION_ACTION_FLAGGED = "FLAGGED"
MODERATION_ACTION_ALLOWED = "ALLOWED"


class ModerationLog(Base):
    """A moderation decision kept for administrator review."""

    __tablename__ = "moderation_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    flagged_words: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    user_id: Mapped[int | None] = mapped_column(
        BigInteger,
        ForeignKey("user_account.id", ondelete="SET NULL"),
        nullable=True,
    )
    ip_address: Mapped[str | None] = mapped_column(Text, nullable=True)
    action_taken: Mapped[str] = mapped_column(
        Text, nullable=False, default=MODERATION_ACTION_BLOCKED
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
