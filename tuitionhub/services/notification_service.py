# tuitionhub/services/notification_service.py
# Creates in-app notifications and fans them out over Redis pub/sub
#
# Usage (from any service, AFTER the primary transaction committed):
#   from tuitionhub.services.notification_service import notify
#   notify(db, user_id=tutor.id, notification_type="application_accepted",
#          title="Application accepted", message="You have been selected ...")
#
# A socket relay subscribes to "<NOTIFICATION_CHANNEL_PREFIX>:<user_id>".
# get_db attaches app.state.publisher to each request session (db.info),
# so services only pass the session.
# notify() never raises: a notification failure must not fail the request
# whose state change already committed.

import json
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

import redis as redis_lib
from sqlalchemy.orm import Session

from tuitionhub.core.exceptions import NotFound
from tuitionhub.db.pagination import paginate
from tuitionhub.models.notification import NOTIFICATION_TYPES, Notification

logger = logging.getLogger("tuitionhub.notifications")


class NotificationPublisher:
    """
    Redis pub/sub connection owned by the app factory (app.state.publisher).
    The client is created on first publish; an empty URL disables publishing.
    """

    def __init__(self, url: str, channel_prefix: str, socket_timeout: int = 2):
        self.url = url
        self.channel_prefix = channel_prefix
        self.socket_timeout = socket_timeout
        self._client: Optional[redis_lib.Redis] = None
        self._lock = threading.Lock()

    @property
    def client(self) -> Optional[redis_lib.Redis]:
        if self._client is not None or not self.url:
            return self._client
        with self._lock:
            if self._client is None:
                self._client = redis_lib.from_url(
                    self.url,
                    socket_connect_timeout=self.socket_timeout,
                    socket_timeout=self.socket_timeout,
                )
        return self._client

    def channel_for(self, user_id: UUID) -> str:
        return f"{self.channel_prefix}:{user_id}"

    def publish(self, notification: Notification) -> bool:
        """Push the event to the recipient's channel. Failures are logged only."""
        try:
            client = self.client
            if client is None:
                return False
            event = {
                "id": str(notification.id),
                "type": notification.notification_type,
                "title": notification.title,
                "message": notification.message,
                "link": notification.link,
                "priority": notification.priority,
                "extra_data": notification.extra_data,
                "created_at": notification.created_at.isoformat(),
            }
            client.publish(self.channel_for(notification.user_id), json.dumps(event))
            return True
        except Exception as e:
            logger.warning(f"Notification publish failed for user {notification.user_id}: {e}")
            return False

    def ping(self) -> bool:
        try:
            client = self.client
            return client is not None and bool(client.ping())
        except Exception:
            return False

    def close(self) -> None:
        with self._lock:
            if self._client is not None:
                self._client.close()
                logger.info("Redis publisher closed")
            self._client = None


def notify(
    db: Session,
    user_id: UUID,
    notification_type: str,
    title: str,
    message: str,
    link: Optional[str] = None,
    priority: str = "medium",
    extra_data: Optional[Dict[str, Any]] = None,
    publisher: Optional[NotificationPublisher] = None,
) -> Optional[Notification]:
    """
    Persist an in-app notification and publish it to the user's channel.

    Args:
        db: Database session (committed separately from the caller's work)
        user_id: Recipient user ID
        notification_type: One of NOTIFICATION_TYPES
        title: Short notification title
        message: Full notification text
        link: Frontend route opened on click
        priority: low | medium | high | urgent
        extra_data: Related entity ids, stored as JSON
        publisher: Defaults to the one get_db attached to the session

    Returns:
        The created Notification, or None if it could not be stored.
    """
    if notification_type not in NOTIFICATION_TYPES:
        logger.error(f"Unknown notification type '{notification_type}' -- skipped")
        return None

    try:
        notification = Notification(
            user_id=user_id,
            notification_type=notification_type,
            title=title,
            message=message,
            link=link,
            priority=priority,
            extra_data=extra_data or {},
            is_read=False,
        )
        db.add(notification)
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Notification insert failed for user {user_id}: {e}")
        return None

    publisher = publisher or db.info.get("publisher")
    if publisher is not None:
        publisher.publish(notification)
    return notification


# ── Inbox ─────────────────────────────────────────────────────────────────────

def _unread(db: Session, user_id: UUID):
    return db.query(Notification).filter(
        Notification.user_id == user_id,
        Notification.is_read == False,  # noqa: E712
    )


def list_for_user(
    db: Session,
    user_id: UUID,
    page: int,
    limit: int,
    unread_only: bool = False,
) -> Tuple[List[Notification], int]:
    if unread_only:
        query = _unread(db, user_id)
    else:
        query = db.query(Notification).filter(Notification.user_id == user_id)
    return paginate(query.order_by(Notification.created_at.desc()), page, limit)


def unread_count(db: Session, user_id: UUID) -> int:
    return _unread(db, user_id).count()


def get_own_or_404(db: Session, user_id: UUID, notification_id: UUID) -> Notification:
    # Someone else's notification is reported as missing
    n = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.user_id == user_id,
    ).first()
    if not n:
        raise NotFound("Notification not found")
    return n


def mark_read(db: Session, user_id: UUID, notification_id: UUID) -> Notification:
    n = get_own_or_404(db, user_id, notification_id)
    if not n.is_read:
        n.is_read = True
        n.read_at = datetime.now(timezone.utc)
        db.commit()
    return n


def mark_all_read(db: Session, user_id: UUID) -> int:
    updated = _unread(db, user_id).update(
        {"is_read": True, "read_at": datetime.now(timezone.utc)},
        synchronize_session=False,
    )
    db.commit()
    return updated


def delete_notification(db: Session, user_id: UUID, notification_id: UUID) -> None:
    db.delete(get_own_or_404(db, user_id, notification_id))
    db.commit()
