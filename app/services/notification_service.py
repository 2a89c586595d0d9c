"""
Notification fan-out
One Notification row per recipient. Fan-out inside a workflow transition never
commits; broadcast is a standalone unit of work and commits itself.
Recipient operations (read, archive, delete) commit through CRUD.
"""

import logging
from datetime import timedelta
from typing import Any, Iterable, List, Optional

from sqlalchemy.orm import Session

from app.core.database import transaction_scope
from app.core.exceptions import NotFoundError
from app.crud import notification as crud_notification, user as crud_user
from app.models.base import utcnow
from app.models.enums import NotificationType, NotificationPriority, NotificationStatus
from app.models.notification import Notification
from app.models.user import User

logger = logging.getLogger(__name__)


def create_notifications(
    db: Session,
    recipient_ids: Iterable[Any],
    type: NotificationType,
    title: str,
    message: str,
    priority: NotificationPriority = NotificationPriority.MEDIUM,
    application_id: Optional[Any] = None,
    created_by: Optional[Any] = None,
    expires_at=None,
    action_url: Optional[str] = None,
) -> List[Notification]:
    """Add one notification per recipient to the session and flush; the caller commits"""
    notifications = []
    for recipient_id in recipient_ids:
        notification = Notification(
            user_id=recipient_id,
            application_id=application_id,
            type=type,
            title=title,
            message=message,
            priority=priority,
            status=NotificationStatus.UNREAD,
            created_by=created_by,
            expires_at=expires_at,
            action_url=action_url,
        )
        db.add(notification)
        notifications.append(notification)
    db.flush()
    return notifications


def notify_active_admins(db: Session, **kwargs) -> List[Notification]:
    admin_ids = [admin.id for admin in crud_user.get_active_admins(db)]
    notifications = create_notifications(db, admin_ids, **kwargs)
    logger.info(f"Notifications queued for {len(admin_ids)} admin users")
    return notifications


def broadcast(
    db: Session,
    *,
    title: str,
    message: str,
    created_by: Any,
    type: NotificationType = NotificationType.GENERAL_ANNOUNCEMENT,
    priority: NotificationPriority = NotificationPriority.MEDIUM,
    target_user_ids: Optional[List[Any]] = None,
    expires_in_days: Optional[int] = None,
) -> int:
    """
    Send an announcement to every user, or to the listed users that exist.
    Commits and returns the number of notifications created.
    """
    recipients = crud_user.get_ids(db, ids=target_user_ids)
    expires_at = utcnow() + timedelta(days=expires_in_days) if expires_in_days else None
    with transaction_scope(db):
        created = create_notifications(
            db, recipients, type=type, title=title, message=message,
            priority=priority, created_by=created_by, expires_at=expires_at,
        )
    logger.info(f"Broadcast '{title}' sent to {len(created)} users")
    return len(created)


def get_own_notification(db: Session, notification_id: Any, user: User) -> Notification:
    notification = crud_notification.get_for_user(db, id=notification_id, user_id=user.id)
    if not notification:
        raise NotFoundError("Notification not found")
    return notification


def mark_read(db: Session, notification_id: Any, user: User) -> Notification:
    notification = get_own_notification(db, notification_id, user)
    if notification.status == NotificationStatus.UNREAD:
        notification = crud_notification.update(
            db, db_obj=notification, obj_in={"status": NotificationStatus.READ, "read_at": utcnow()}
        )
    return notification


def archive(db: Session, notification_id: Any, user: User) -> Notification:
    notification = get_own_notification(db, notification_id, user)
    return crud_notification.update(
        db, db_obj=notification, obj_in={"status": NotificationStatus.ARCHIVED, "archived_at": utcnow()}
    )


def delete_notification(db: Session, notification_id: Any, user: User) -> None:
    """Recipients delete their own notifications; admins may delete any"""
    notification = crud_notification.get(db, notification_id)
    if not notification or (notification.user_id != user.id and not user.is_admin):
        raise NotFoundError("Notification not found")
    crud_notification.remove(db, id=notification.id)
