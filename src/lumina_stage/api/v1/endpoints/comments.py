# src/lumina_stage/api/v1/endpoints/comments.py
"""Comment endpoints: threads, replies, pins and reactions."""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from lumina_stage.api.v1.dependencies import (
    CurrentUserDep,
    ModerationDep,
    OptionalUserDep,
    SessionDep,
    enforce_cooldown,
    ensure_allowed,
)
from lumina_stage.core.settings import settings
from lumina_stage.models import Blog, Comment, User
from lumina_stage.models.notification import NOTIFICATION_COMMENT, NOTIFICATION_REPLY
from lumina_stage.schemas.comment import (
    CommentCreate,
    CommentDeleteResponse,
    CommentResponse,
    PinResponse,
    ReactionRequest,
    ReactionResponse,
    serialize_thread,
)
from lumina_stage.services import blogs as blog_service
from lumina_stage.services import comments as comment_service
from lumina_stage.services.moderation import ModerationService
from lumina_stage.services.notifications import notify
from lumina_stage.services.threads import ThreadNode, build_thread

logger = logging.getLogger(__name__)

router = APIRouter(tags=["comments"])


def _get_comment_or_404(db: Session, comment_id: int) -> Comment:
    comment = db.get(Comment, comment_id)
    if comment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")
    return comment


def _get_visible_blog_or_404(db: Session, blog_id: int, viewer: User | None) -> Blog:
    blog = db.get(Blog, blog_id)
    if blog is None or not blog_service.can_view(blog, viewer):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Blog not found")
    return blog


def _last_comment_at(db: Session, user_id: int) -> datetime | None:
    return db.scalar(
        select(Comment.created_at)
        .where(Comment.author_id == user_id)
        .order_by(Comment.created_at.desc())
        .limit(1)
    )


def _single(comment: Comment, post_author_id: int) -> CommentResponse:
    return serialize_thread([ThreadNode(comment)], post_author_id)[0]


async def _add_comment(
    db: Session,
    moderation: ModerationService,
    request: Request,
    user: User,
    blog: Blog,
    content: str,
    parent: Comment | None = None,
) -> Comment:
    enforce_cooldown(
        user,
        _last_comment_at(db, user.id),
        settings.comment_cooldown_seconds,
        "commenting",
    )
    await ensure_allowed(moderation, db, content, user, request)

    comment = Comment(
        content=content,
        author_id=user.id,
        blog_id=blog.id,
        parent_id=parent.id if parent is not None else None,
        depth=parent.depth + 1 if parent is not None else 1,
    )
    db.add(comment)
    db.flush()

    target_url = f"/blogs/{blog.id}#comment-{comment.id}"
    if parent is not None:
        notify(
            db,
            user_id=parent.author_id,
            sender_id=user.id,
            type=NOTIFICATION_REPLY,
            message=f"{user.full_name} replied to your comment.",
            blog_id=blog.id,
            target_url=target_url,
        )
    else:
        notify(
            db,
            user_id=blog.author_id,
            sender_id=user.id,
            type=NOTIFICATION_COMMENT,
            message=f'{user.full_name} commented on your blog "{blog.title}".',
            blog_id=blog.id,
            target_url=target_url,
        )
    db.commit()
    db.refresh(comment)
    return comment


@router.get("/blogs/{blog_id}/comments", response_model=list[CommentResponse])
async def list_comments(
    blog_id: int,
    db: SessionDep,
    viewer: OptionalUserDep,
) -> list[CommentResponse]:
    """The blog's comment thread: author first, then pinned, then newest."""
    blog = _get_visible_blog_or_404(db, blog_id, viewer)
    comments = db.scalars(
        select(Comment).where(Comment.blog_id == blog.id).order_by(Comment.id)
    ).all()
    return serialize_thread(build_thread(comments, blog.author_id), blog.author_id)


@router.post(
    "/blogs/{blog_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_comment(
    blog_id: int,
    payload: CommentCreate,
    request: Request,
    current_user: CurrentUserDep,
    db: SessionDep,
    moderation: ModerationDep,
) -> CommentResponse:
    """Add a top-level comment and notify the blog's author."""
    blog = _get_visible_blog_or_404(db, blog_id, current_user)
    comment = await _add_comment(db, moderation, request, current_user, blog, payload.content)
    return _single(comment, blog.author_id)


@router.post(
    "/comments/{comment_id}/reply",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def reply_to_comment(
    comment_id: int,
    payload: CommentCreate,
    request: Request,
    current_user: CurrentUserDep,
    db: SessionDep,
    moderation: ModerationDep,
) -> CommentResponse:
    """Reply to a comment; the reply joins the parent's blog one level deeper."""
    parent = _get_comment_or_404(db, comment_id)
    if parent.is_deleted:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot reply to a deleted comment",
        )
    blog = _get_visible_blog_or_404(db, parent.blog_id, current_user)
    comment = await _add_comment(
        db, moderation, request, current_user, blog, payload.content, parent=parent
    )
    return _single(comment, blog.author_id)


@router.delete("/comments/{comment_id}", response_model=CommentDeleteResponse)
async def delete_comment(
    comment_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> CommentDeleteResponse:
    """Delete a comment.

    Allowed for the comment's author, the blog's author and administrators.
    Comments that have replies are kept as tombstones.
    """
    comment = _get_comment_or_404(db, comment_id)
    blog = db.get(Blog, comment.blog_id)
    allowed = (
        comment.author_id == current_user.id
        or (blog is not None and blog.author_id == current_user.id)
        or current_user.is_admin
    )
    if not allowed:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not allowed to delete this comment",
        )
    removed = comment_service.delete_comment(db, comment)
    return CommentDeleteResponse(removed=removed, tombstoned=not removed)


@router.post("/comments/{comment_id}/pin", response_model=PinResponse)
async def pin_comment(
    comment_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> PinResponse:
    """Pin or unpin a comment; only the blog's author may pin."""
    comment = _get_comment_or_404(db, comment_id)
    blog = db.get(Blog, comment.blog_id)
    if blog is None or blog.author_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the blog author can pin comments",
        )
    if comment.is_deleted:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot pin a deleted comment",
        )
    return PinResponse(pinned=comment_service.toggle_pin(db, comment))


@router.post("/comments/{comment_id}/react", response_model=ReactionResponse)
async def react_to_comment(
    comment_id: int,
    payload: ReactionRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> ReactionResponse:
    """Toggle or switch the caller's reaction on a comment."""
    symbol = comment_service.parse_symbol(payload.emoji)
    if symbol is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Unsupported reaction: {payload.emoji}",
        )
    comment = _get_comment_or_404(db, comment_id)
    if comment.is_deleted:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot react to a deleted comment",
        )
    _get_visible_blog_or_404(db, comment.blog_id, current_user)
    current = comment_service.toggle_reaction(db, comment, current_user.id, symbol)
    return ReactionResponse(
        reaction=current.value if current is not None else None,
        counts=comment_service.reaction_counts(db, comment.id),
    )
