"""Announcement schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

AnnouncementType = Literal["info", "warning", "danger", "success"]


class AnnouncementCreate(BaseModel):
    """Schema for publishing a site-wide announcement."""

    message: str = Field(..., min_length=1, max_length=500)
    type: AnnouncementType = "info"
    duration_hours: float | None = Field(
        None,
        gt=0,
        description="Hours until the announcement expires; omit for no expiry",
    )


class AnnouncementResponse(BaseModel):
    id: int
    message: str
    type: str
    is_active: bool
    expires_at: datetime | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
