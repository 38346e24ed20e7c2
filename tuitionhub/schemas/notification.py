# tuitionhub/schemas/notification.py

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel

from tuitionhub.schemas.common import Pagination


class NotificationResponse(BaseModel):
    id: UUID
    type: str
    title: str
    message: str
    link: Optional[str] = None
    priority: str
    extra_data: Optional[Dict[str, Any]] = None
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime

    @classmethod
    def from_model(cls, n) -> "NotificationResponse":
        # Column is notification_type; clients read "type"
        return cls(
            id=n.id,
            type=n.notification_type,
            title=n.title,
            message=n.message,
            link=n.link,
            priority=n.priority,
            extra_data=n.extra_data,
            is_read=n.is_read,
            read_at=n.read_at,
            created_at=n.created_at,
        )


class NotificationEnvelope(BaseModel):
    success: bool = True
    notification: NotificationResponse


class NotificationListResponse(BaseModel):
    success: bool = True
    notifications: List[NotificationResponse]
    unread_count: int
    pagination: Pagination


class UnreadCountResponse(BaseModel):
    success: bool = True
    count: int
