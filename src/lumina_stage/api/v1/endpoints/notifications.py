# src/lumina_stage/api/v1/endpoints/notifications.py
"""Notification inbox endpoints."""

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy import select

from lumina_stage.api.v1.dependencies import CurrentUserDep, OptionalUserDep, SessionDep
from lumina_stage.models import Notification
from lumina_stage.schemas.notification import NotificationResponse, UnreadCountResponse
from lumina_stage.services.notifications import unread_count

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/", response_model=list[NotificationResponse])
async def list_notifications(
    current_user: CurrentUserDep,
    db: SessionDep,
    limit: int = Query(50, ge=1, le=200, description="Maximum number of notifications"),
) -> list[Notification]:
    """The caller's notifications, newest first."""
    return list(
        db.scalars(
            select(Notification)
            .where(Notification.user_id == current_user.id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit)
        ).all()
    )


@router.get("/unread-count", response_model=UnreadCountResponse)
async def read_unread_count(viewer: OptionalUserDep, db: SessionDep) -> UnreadCountResponse:
    """Number of unread notifications; always zero for anonymous callers."""
    if viewer is None:
        return UnreadCountResponse(unread=0)
    return UnreadCountResponse(unread=unread_count(db, viewer.id))


@router.post("/{notification_id}/read", response_model=UnreadCountResponse)
async def mark_read(
    notification_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> UnreadCountResponse:
    """Mark one of the caller's notifications as read.

    Raises:
        HTTPException: 404 if the notification does not exist or belongs to
            someone else
    """
    notification = db.get(Notification, notification_id)
    if notification is None or notification.user_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found",
        )
    notification.read = True
    db.commit()
    return UnreadCountResponse(unread=unread_count(db, current_user.id))
