# src/lumina_stage/api/v1/endpoints/announcements.py
"""Public announcement endpoint."""

from fastapi import APIRouter

from lumina_stage.api.v1.dependencies import SessionDep
from lumina_stage.models import Announcement
from lumina_stage.schemas.announcement import AnnouncementResponse
from lumina_stage.services.announcements import active_announcement

router = APIRouter(prefix="/announcements", tags=["announcements"])


@router.get("/active", response_model=AnnouncementResponse | None)
async def read_active_announcement(db: SessionDep) -> Announcement | None:
    """The live announcement, or null when none is active or it has expired."""
    return active_announcement(db)
