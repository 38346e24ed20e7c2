# tuitionhub/models/notification.py
# In-app notification record for platform events

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, DateTime, Enum, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import relationship

from tuitionhub.db.base_class import Base

NOTIFICATION_TYPES = (
    "application_received",   # Student receives a tutor application
    "application_accepted",   # Tutor's application accepted (paid)
    "application_rejected",   # Tutor's application rejected
    "tuition_approved",       # Admin approved a posting
    "tuition_rejected",       # Admin rejected a posting
    "payment_received",       # Tutor credited
    "payment_made",           # Student charged
    "payment_refunded",       # Admin refunded a payment
    "review_received",        # Tutor received or had a review edited
    "account_update",         # Account role/status changed
)

PRIORITIES = ("low", "medium", "high", "urgent")


class Notification(Base):
    """
    In-app notification for a user.
    Created by notification_service.notify(); also pushed on Redis for sockets.
    """
    __tablename__ = "notifications"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    notification_type = Column(
        Enum(*NOTIFICATION_TYPES, name="notification_type_enum"),
        nullable=False,
        index=True,
    )
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)

    # Frontend navigates here on click, e.g. "/my-applications"
    link = Column(String(512), nullable=True)
    priority = Column(
        Enum(*PRIORITIES, name="notification_priority_enum"),
        nullable=False,
        default="medium",
    )

    # Related entity ids, e.g. {"tuition_id": "...", "application_id": "..."}
    # Named extra_data (not metadata -- reserved by SQLAlchemy)
    extra_data = Column(JSON, nullable=True)

    is_read = Column(Boolean, nullable=False, default=False, index=True)
    read_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )

    user = relationship("User", back_populates="notifications")

    def __repr__(self) -> str:
        return (
            f"<Notification user={self.user_id} "
            f"type={self.notification_type} read={self.is_read}>"
        )
