# tuitionhub/api/v1/endpoints/notifications.py
# In-app notification inbox for the logged-in user
#
# GET    /notifications               -- paginated, newest first
# GET    /notifications/unread-count
# PATCH  /notifications/read-all
# PATCH  /notifications/{id}/read
# DELETE /notifications/{id}

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

import tuitionhub.db.base  # noqa: F401
from tuitionhub.core.config import settings
from tuitionhub.core.dependencies import require_login
from tuitionhub.db.session import get_db
from tuitionhub.models.user import User
from tuitionhub.schemas.common import MessageResponse, Pagination
from tuitionhub.schemas.notification import (
    NotificationEnvelope,
    NotificationListResponse,
    NotificationResponse,
    UnreadCountResponse,
)
from tuitionhub.services import notification_service

router = APIRouter()


@router.get("", response_model=NotificationListResponse, summary="List own notifications")
def list_notifications(
    unread_only: bool = Query(False),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    current_user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    notifications, total = notification_service.list_for_user(
        db, current_user.id, page, limit, unread_only=unread_only
    )
    return NotificationListResponse(
        notifications=[NotificationResponse.from_model(n) for n in notifications],
        unread_count=notification_service.unread_count(db, current_user.id),
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/unread-count", response_model=UnreadCountResponse, summary="Unread notification count")
def get_unread_count(
    current_user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    return UnreadCountResponse(count=notification_service.unread_count(db, current_user.id))


@router.patch("/read-all", response_model=MessageResponse, summary="Mark all notifications as read")
def mark_all_read(
    current_user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    updated = notification_service.mark_all_read(db, current_user.id)
    return MessageResponse(message=f"{updated} notification(s) marked as read")


@router.patch("/{notification_id}/read", response_model=NotificationEnvelope, summary="Mark one as read")
def mark_read(
    notification_id: UUID,
    current_user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    n = notification_service.mark_read(db, current_user.id, notification_id)
    return NotificationEnvelope(notification=NotificationResponse.from_model(n))


@router.delete("/{notification_id}", response_model=MessageResponse, summary="Delete a notification")
def delete_notification(
    notification_id: UUID,
    current_user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    notification_service.delete_notification(db, current_user.id, notification_id)
    return MessageResponse(message="Notification deleted")
