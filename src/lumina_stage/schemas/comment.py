"""Comment-related Pydantic schemas."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .user import UserSummary


class CommentCreate(BaseModel):
    """Schema for a new comment or reply."""

    content: str = Field(..., min_length=1, max_length=5000)

    @field_validator("content")
    @classmethod
    def strip_content(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Comment cannot be empty")
        return value


class CommentResponse(BaseModel):
    """A comment with its nested replies."""

    id: int
    content: str
    author: UserSummary
    blog_id: int
    parent_id: int | None
    depth: int
    is_pinned: bool
    is_deleted: bool
    is_author: bool = False
    created_at: datetime
    reactions: dict[str, int] = Field(default_factory=dict)
    children: list[CommentResponse] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


CommentResponse.model_rebuild()


class ReactionRequest(BaseModel):
    emoji: str = Field(..., description="Reaction emoji or its name, e.g. LIKE")


class ReactionResponse(BaseModel):
    """Reaction state after a click."""

    reaction: str | None
    counts: dict[str, int]


class PinResponse(BaseModel):
    pinned: bool


class CommentDeleteResponse(BaseModel):
    removed: bool
    tombstoned: bool


def _counts(reactions: Iterable[Any]) -> dict[str, int]:
    counts: dict[str, int] = {}
    for symbol in reactions:
        counts[symbol.value] = counts.get(symbol.value, 0) + 1
    return counts


def serialize_thread(nodes: Iterable[Any], post_author_id: int | None = None) -> list[CommentResponse]:
    """Convert thread nodes into nested response models without recursion."""
    roots: list[CommentResponse] = []
    stack: list[tuple[Any, list[CommentResponse]]] = [
        (node, roots) for node in reversed(list(nodes))
    ]
    while stack:
        node, siblings = stack.pop()
        comment = node.comment
        item = CommentResponse(
            id=comment.id,
            content=comment.content,
            author=UserSummary.model_validate(comment.author),
            blog_id=comment.blog_id,
            parent_id=comment.parent_id,
            depth=comment.depth,
            is_pinned=comment.is_pinned,
            is_deleted=comment.is_deleted,
            is_author=post_author_id is not None and comment.author_id == post_author_id,
            created_at=comment.created_at,
            reactions=_counts(comment.reactions.values()),
        )
        siblings.append(item)
        stack.extend((child, item.children) for child in reversed(node.children))
    return roots
