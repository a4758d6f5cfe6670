"""Announcement lookup."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from lumina_stage.db.time import utcnow
from lumina_stage.models import Announcement


def active_announcement(db: Session, now: datetime | None = None) -> Announcement | None:
    """Return the newest active announcement that has not expired."""
    current = now or utcnow()
    candidates = db.scalars(
        select(Announcement)
        .where(Announcement.is_active.is_(True))
        .order_by(Announcement.created_at.desc(), Announcement.id.desc())
    )
    for announcement in candidates:
        if not announcement.is_expired(current):
            return announcement
    return None
