"""Blog-related Pydantic schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from lumina_stage.models import Blog
from lumina_stage.services.blogs import read_time

from .comment import CommentResponse
from .user import UserResponse, UserSummary

BlogStatus = Literal["draft", "published", "private"]


def _clean_tags(value: list[str]) -> list[str]:
    tags: list[str] = []
    for tag in value:
        cleaned = tag.strip()
        if cleaned and cleaned not in tags:
            tags.append(cleaned)
    return tags


class BlogCreate(BaseModel):
    """Schema for publishing a new blog."""

    title: str = Field(..., min_length=1, max_length=200)
    body: str = Field(..., min_length=1, description="HTML body")
    category: str = Field(..., min_length=1, max_length=50)
    tags: list[str] = Field(..., description="At least one tag")
    cover_image_url: str | None = Field(None, max_length=500)
    status: BlogStatus = "published"

    @field_validator("title", "category")
    @classmethod
    def strip_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Field must not be blank")
        return value

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, value: list[str]) -> list[str]:
        tags = _clean_tags(value)
        if not tags:
            raise ValueError("At least one tag is required")
        return tags


class BlogUpdate(BaseModel):
    """Partial update of an existing blog."""

    title: str | None = Field(None, min_length=1, max_length=200)
    body: str | None = Field(None, min_length=1)
    category: str | None = Field(None, min_length=1, max_length=50)
    tags: list[str] | None = None
    cover_image_url: str | None = Field(None, max_length=500)
    status: BlogStatus | None = None

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        tags = _clean_tags(value)
        if not tags:
            raise ValueError("At least one tag is required")
        return tags


class BlogResponse(BaseModel):
    """Schema for blog information returned by the API."""

    id: int
    title: str
    body: str
    cover_image_url: str | None
    category: str | None
    tags: list[str]
    status: str
    featured: bool
    views: int
    likes: int
    author: UserSummary
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BlogCard(BaseModel):
    """Compact blog listing entry."""

    id: int
    title: str
    cover_image_url: str | None
    category: str | None
    tags: list[str]
    featured: bool
    views: int
    likes: int
    author: UserSummary
    created_at: datetime
    read_time: int | None = None
    score: float | None = None

    model_config = ConfigDict(from_attributes=True)


class BlogDetailResponse(BaseModel):
    """A blog with its comment thread and per-viewer flags."""

    blog: BlogResponse
    comments: list[CommentResponse]
    comment_count: int
    is_bookmarked: bool
    is_liked: bool
    meta_description: str


class FeedResponse(BaseModel):
    blogs: list[BlogCard]
    has_more: bool
    page: int


class HomeFeedResponse(BaseModel):
    """Home feed plus sidebar content."""

    blogs: list[BlogCard]
    personalized: bool
    categories: list[str]
    featured: list[BlogCard]
    trending: list[BlogCard]


class LikeResponse(BaseModel):
    liked: bool
    likes: int


class SummaryResponse(BaseModel):
    id: int
    title: str
    summary: str
    highlights: list[str]
    cover_image_url: str | None


class TagCount(BaseModel):
    tag: str
    count: int


class AuthorProfileResponse(BaseModel):
    """Public profile with follow counts and published blogs."""

    user: UserResponse
    followers: int
    following: int
    is_following: bool
    blogs: list[BlogCard]


def blog_card(blog: Blog, score: float | None = None) -> BlogCard:
    """Build a listing entry, including the estimated reading time."""
    card = BlogCard.model_validate(blog)
    return card.model_copy(update={"read_time": read_time(blog.body), "score": score})
