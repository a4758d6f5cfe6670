# src/lumina_stage/models/announcement.py
"""Site-wide announcements posted by administrators."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from lumina_stage.db.session import Base
from lumina_stage.db.time import as_utc, utcnow

ANNOUNCEMENT_TYPES = ("info", "warning", "danger", "success")


class Announcement(Base):
    """Banner message shown to every visitor while active."""

    __tablename__ = "announcement"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(Text, nullable=False, default="info")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    # NULL means the announcement never expires.
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    def is_expired(self, now: datetime) -> bool:
        """Return True once the expiry time has passed."""
        return self.expires_at is not None and as_utc(self.expires_at) <= now
