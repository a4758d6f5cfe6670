"""User-related Pydantic schemas."""

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _normalize_email(value: str) -> str:
    email = value.strip().lower()
    if not _EMAIL_PATTERN.match(email):
        raise ValueError("Invalid email address")
    return email


class SignupRequest(BaseModel):
    """Schema for creating an account."""

    full_name: str = Field(..., min_length=1, max_length=100, description="Display name")
    email: str = Field(..., max_length=254, description="Login email address")
    password: str = Field(..., min_length=8, max_length=128, description="Plain-text password")

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _normalize_email(value)

    @field_validator("full_name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Full name is required")
        return value


class SigninRequest(BaseModel):
    """Schema for logging in with email and password."""

    email: str
    password: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return value.strip().lower()


class TokenResponse(BaseModel):
    """Bearer token issued after a successful login."""

    access_token: str
    token_type: str = "bearer"


class UserSummary(BaseModel):
    """Minimal author information embedded in other payloads."""

    id: int
    full_name: str
    profile_pic: str

    model_config = ConfigDict(from_attributes=True)


class UserResponse(BaseModel):
    """Public profile information."""

    id: int
    full_name: str
    bio: str
    website: str
    profile_pic: str
    linkedin: str
    twitter: str
    github: str
    instagram: str
    role: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PrivateUserResponse(UserResponse):
    """Profile fields only the owner may see."""

    email: str
    status: str
    email_on_comment: bool
    email_on_follow: bool


class UserUpdate(BaseModel):
    """Partial profile update; omitted fields are left unchanged."""

    full_name: str | None = Field(None, min_length=1, max_length=100)
    bio: str | None = Field(None, max_length=500)
    website: str | None = Field(None, max_length=200)
    profile_pic: str | None = Field(None, max_length=500)
    linkedin: str | None = Field(None, max_length=200)
    twitter: str | None = Field(None, max_length=200)
    github: str | None = Field(None, max_length=200)
    instagram: str | None = Field(None, max_length=200)
    email_on_comment: bool | None = None
    email_on_follow: bool | None = None


class MonthlyActivity(BaseModel):
    """Content created during one calendar month."""

    month: str = Field(..., description="Month in YYYY-MM form")
    blogs: int = 0
    likes: int = 0
    comments: int = 0


class UserStats(BaseModel):
    """Aggregate numbers for the profile dashboard."""

    blog_count: int
    total_likes: int
    total_comments: int
    followers: int
    following: int
    activity: list[MonthlyActivity]


class MyProfileResponse(BaseModel):
    """The caller's own profile with dashboard statistics."""

    user: PrivateUserResponse
    stats: UserStats


class FollowResponse(BaseModel):
    following: bool
    followers: int


class BookmarkResponse(BaseModel):
    bookmarked: bool
