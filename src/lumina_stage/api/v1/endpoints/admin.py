# src/lumina_stage/api/v1/endpoints/admin.py
"""Administrator console endpoints."""

from __future__ import annotations

import logging
from datetime import timedelta

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session

from lumina_stage.api.v1.dependencies import AdminUserDep, SessionDep
from lumina_stage.db.time import utcnow
from lumina_stage.models import Announcement, Blog, Comment, User
from lumina_stage.schemas.admin import (
    AdminDashboardResponse,
    AdminStats,
    AdminUserEntry,
    FeatureResponse,
    RoleResponse,
)
from lumina_stage.schemas.announcement import AnnouncementCreate, AnnouncementResponse
from lumina_stage.schemas.blog import blog_card
from lumina_stage.services import accounts as account_service
from lumina_stage.services import blogs as blog_service
from lumina_stage.services.announcements import active_announcement

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


def _count(db: Session, model: type) -> int:
    return db.scalar(select(func.count()).select_from(model)) or 0


def _get_user_or_404(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


def _get_blog_or_404(db: Session, blog_id: int) -> Blog:
    blog = db.get(Blog, blog_id)
    if blog is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Blog not found")
    return blog


@router.get("/", response_model=AdminDashboardResponse)
async def read_dashboard(
    admin: AdminUserDep,
    db: SessionDep,
    search: str | None = Query(None, max_length=100, description="Filter users by name or email"),
) -> AdminDashboardResponse:
    """Site totals, recent users and blogs, and the live announcement."""
    user_query = select(User)
    if search:
        pattern = f"%{search.strip()}%"
        user_query = user_query.where(or_(User.full_name.ilike(pattern), User.email.ilike(pattern)))
    users = db.scalars(user_query.order_by(User.created_at.desc(), User.id.desc()).limit(50)).all()
    blogs = db.scalars(select(Blog).order_by(Blog.created_at.desc(), Blog.id.desc()).limit(20)).all()

    announcement = active_announcement(db)
    return AdminDashboardResponse(
        stats=AdminStats(
            users=_count(db, User),
            blogs=_count(db, Blog),
            comments=_count(db, Comment),
        ),
        users=[AdminUserEntry.model_validate(user) for user in users],
        blogs=[blog_card(blog) for blog in blogs],
        announcement=(
            AnnouncementResponse.model_validate(announcement) if announcement is not None else None
        ),
    )


@router.post("/users/{user_id}/role", response_model=RoleResponse)
async def toggle_user_role(user_id: int, admin: AdminUserDep, db: SessionDep) -> RoleResponse:
    """Promote a user to ADMIN or demote them to USER."""
    if user_id == admin.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot change your own role",
        )
    user = _get_user_or_404(db, user_id)
    return RoleResponse(id=user.id, role=account_service.toggle_role(db, user))


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: int, admin: AdminUserDep, db: SessionDep) -> None:
    """Delete an account and its content."""
    if user_id == admin.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot delete yourself",
        )
    user = _get_user_or_404(db, user_id)
    account_service.delete_user(db, user)
    logger.info("Admin %s deleted user %s", admin.id, user_id)


@router.delete("/blogs/{blog_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_blog(blog_id: int, admin: AdminUserDep, db: SessionDep) -> None:
    blog = _get_blog_or_404(db, blog_id)
    blog_service.delete_blog(db, blog)
    logger.info("Admin %s removed blog %s", admin.id, blog_id)


@router.post("/blogs/{blog_id}/feature", response_model=FeatureResponse)
async def toggle_feature(blog_id: int, admin: AdminUserDep, db: SessionDep) -> FeatureResponse:
    """Feature or un-feature a blog."""
    blog = _get_blog_or_404(db, blog_id)
    blog.featured = not blog.featured
    db.commit()
    return FeatureResponse(id=blog.id, featured=blog.featured)


@router.post(
    "/announcements",
    response_model=AnnouncementResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_announcement(
    payload: AnnouncementCreate,
    admin: AdminUserDep,
    db: SessionDep,
) -> Announcement:
    """Publish an announcement, replacing whichever one was active."""
    db.execute(
        update(Announcement)
        .where(Announcement.is_active.is_(True))
        .values(is_active=False)
        .execution_options(synchronize_session="fetch")
    )
    expires_at = None
    if payload.duration_hours is not None:
        expires_at = utcnow() + timedelta(hours=payload.duration_hours)
    announcement = Announcement(
        message=payload.message.strip(),
        type=payload.type,
        is_active=True,
        expires_at=expires_at,
    )
    db.add(announcement)
    db.commit()
    db.refresh(announcement)
    return announcement


@router.delete("/announcements/{announcement_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_announcement(announcement_id: int, admin: AdminUserDep, db: SessionDep) -> None:
    announcement = db.get(Announcement, announcement_id)
    if announcement is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Announcement not found",
        )
    db.delete(announcement)
    db.commit()
