"""Admin console schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from .announcement import AnnouncementResponse
from .blog import BlogCard


class AdminUserEntry(BaseModel):
    """User row in the admin console."""

    id: int
    full_name: str
    email: str
    role: str
    status: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AdminStats(BaseModel):
    users: int
    blogs: int
    comments: int


class AdminDashboardResponse(BaseModel):
    stats: AdminStats
    users: list[AdminUserEntry]
    blogs: list[BlogCard]
    announcement: AnnouncementResponse | None


class RoleResponse(BaseModel):
    id: int
    role: str


class FeatureResponse(BaseModel):
    id: int
    featured: bool
