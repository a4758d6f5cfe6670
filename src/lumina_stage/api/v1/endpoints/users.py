# src/lumina_stage/api/v1/endpoints/users.py
"""User profile, follow and bookmark endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from lumina_stage.api.v1.dependencies import CurrentUserDep, OptionalUserDep, SessionDep
from lumina_stage.db.time import as_utc, utcnow
from lumina_stage.models import Blog, Bookmark, Comment, Follow, Notification, User
from lumina_stage.models.blog import BLOG_STATUS_PUBLISHED
from lumina_stage.models.notification import NOTIFICATION_FOLLOW
from lumina_stage.schemas.blog import AuthorProfileResponse, BlogCard, blog_card
from lumina_stage.schemas.user import (
    BookmarkResponse,
    FollowResponse,
    MonthlyActivity,
    MyProfileResponse,
    PrivateUserResponse,
    UserResponse,
    UserStats,
    UserUpdate,
)
from lumina_stage.services import blogs as blog_service
from lumina_stage.services.notifications import notify

router = APIRouter(prefix="/users", tags=["users"])


def _follow_counts(db: Session, user_id: int) -> tuple[int, int]:
    followers = db.scalar(
        select(func.count()).select_from(Follow).where(Follow.followee_id == user_id)
    ) or 0
    following = db.scalar(
        select(func.count()).select_from(Follow).where(Follow.follower_id == user_id)
    ) or 0
    return followers, following


def _user_stats(db: Session, user: User) -> UserStats:
    now = utcnow()
    buckets = blog_service.month_buckets(now)
    activity = [
        MonthlyActivity(month=f"{year:04d}-{month:02d}") for year, month in buckets
    ]

    blogs = db.execute(
        select(Blog.id, Blog.likes, Blog.created_at).where(Blog.author_id == user.id)
    ).all()
    for _, likes, created_at in blogs:
        index = blog_service.bucket_index(buckets, as_utc(created_at))
        if index is not None:
            activity[index].blogs += 1
            activity[index].likes += likes

    blog_ids = [blog_id for blog_id, _, _ in blogs]
    comment_times = (
        db.scalars(select(Comment.created_at).where(Comment.blog_id.in_(blog_ids))).all()
        if blog_ids
        else []
    )
    for created_at in comment_times:
        index = blog_service.bucket_index(buckets, as_utc(created_at))
        if index is not None:
            activity[index].comments += 1

    followers, following = _follow_counts(db, user.id)
    return UserStats(
        blog_count=len(blogs),
        total_likes=sum(likes for _, likes, _ in blogs),
        total_comments=len(comment_times),
        followers=followers,
        following=following,
        activity=activity,
    )


@router.get("/me", response_model=MyProfileResponse)
async def read_my_profile(current_user: CurrentUserDep, db: SessionDep) -> MyProfileResponse:
    """Return the caller's profile with dashboard statistics."""
    return MyProfileResponse(
        user=PrivateUserResponse.model_validate(current_user),
        stats=_user_stats(db, current_user),
    )


@router.patch("/me", response_model=PrivateUserResponse)
async def update_my_profile(
    payload: UserUpdate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> User:
    """Update profile fields; omitted fields keep their value."""
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    for field_name, value in changes.items():
        setattr(current_user, field_name, value.strip() if isinstance(value, str) else value)
    if changes:
        current_user.last_profile_edit = utcnow()
    db.commit()
    db.refresh(current_user)
    return current_user


@router.get("/me/bookmarks", response_model=list[BlogCard])
async def list_my_bookmarks(current_user: CurrentUserDep, db: SessionDep) -> list[BlogCard]:
    """Blogs the caller has saved, most recently saved first."""
    blogs = db.scalars(
        select(Blog)
        .join(Bookmark, Bookmark.blog_id == Blog.id)
        .where(Bookmark.user_id == current_user.id)
        .order_by(Bookmark.created_at.desc())
    ).all()
    return [blog_card(blog) for blog in blogs]


@router.get("/bookmarks/{blog_id}", response_model=BookmarkResponse)
async def read_bookmark(
    blog_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> BookmarkResponse:
    return BookmarkResponse(bookmarked=blog_service.is_bookmarked(db, current_user.id, blog_id))


@router.post("/bookmarks/{blog_id}", response_model=BookmarkResponse)
async def toggle_bookmark(
    blog_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> BookmarkResponse:
    """Save or unsave a blog."""
    blog = db.get(Blog, blog_id)
    if blog is None or not blog_service.can_view(blog, current_user):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Blog not found")

    existing = db.get(Bookmark, (current_user.id, blog_id))
    if existing is not None:
        db.delete(existing)
        db.commit()
        return BookmarkResponse(bookmarked=False)

    db.add(Bookmark(user_id=current_user.id, blog_id=blog_id))
    db.commit()
    return BookmarkResponse(bookmarked=True)


@router.get("/{user_id}", response_model=AuthorProfileResponse)
async def read_user_profile(
    user_id: int,
    db: SessionDep,
    viewer: OptionalUserDep,
) -> AuthorProfileResponse:
    """Public profile with follow counts and published blogs."""
    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    followers, following = _follow_counts(db, user.id)
    is_following = (
        viewer is not None and db.get(Follow, (viewer.id, user.id)) is not None
    )
    blogs = db.scalars(
        select(Blog)
        .where(Blog.author_id == user.id, Blog.status == BLOG_STATUS_PUBLISHED)
        .order_by(Blog.created_at.desc(), Blog.id.desc())
    ).all()
    return AuthorProfileResponse(
        user=UserResponse.model_validate(user),
        followers=followers,
        following=following,
        is_following=is_following,
        blogs=[blog_card(blog) for blog in blogs],
    )


@router.post("/{user_id}/follow", response_model=FollowResponse)
async def toggle_follow(
    user_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> FollowResponse:
    """Follow or unfollow another user.

    Following sends the target a notification; unfollowing withdraws it.
    """
    if user_id == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot follow yourself",
        )
    target = db.get(User, user_id)
    if target is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    existing = db.get(Follow, (current_user.id, target.id))
    if existing is not None:
        db.delete(existing)
        db.execute(
            delete(Notification).where(
                Notification.user_id == target.id,
                Notification.sender_id == current_user.id,
                Notification.type == NOTIFICATION_FOLLOW,
            )
        )
        following = False
    else:
        db.add(Follow(follower_id=current_user.id, followee_id=target.id))
        notify(
            db,
            user_id=target.id,
            sender_id=current_user.id,
            type=NOTIFICATION_FOLLOW,
            message=f"{current_user.full_name} started following you.",
            target_url=f"/users/{current_user.id}",
        )
        following = True
    db.commit()

    followers, _ = _follow_counts(db, target.id)
    return FollowResponse(following=following, followers=followers)
