"""Notification schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from .user import UserSummary


class NotificationResponse(BaseModel):
    """A notification as shown in the inbox."""

    id: int
    type: str
    message: str
    blog_id: int | None
    target_url: str | None
    read: bool
    created_at: datetime
    sender: UserSummary

    model_config = ConfigDict(from_attributes=True)


class UnreadCountResponse(BaseModel):
    unread: int
