"""
Notification API Endpoints for the Visa Processing System
"""

from typing import Optional
import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.v1.endpoints.auth import get_current_user, require_admin
from app.core.database import get_db
from app.crud import notification as crud_notification
from app.models.enums import NotificationStatus, NotificationType, NOTIFICATION_TYPE_LABELS
from app.models.user import User
from app.schemas.common import PaginationMeta, success_response, offset_for
from app.schemas.notification import (
    BroadcastRequest, BroadcastResult, NotificationResponse, NotificationListPayload, NotificationTypeOption
)
from app.services import notification_service
from app.services.audit_service import audit_service

router = APIRouter()


@router.get("/", summary="List My Notifications")
def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[NotificationStatus] = Query(None),
    type: Optional[NotificationType] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    notifications, total = crud_notification.list_for_user(
        db, user_id=current_user.id, status=status, type=type, skip=offset_for(page, limit), limit=limit
    )
    return success_response(NotificationListPayload(
        notifications=[NotificationResponse.model_validate(n) for n in notifications],
        pagination=PaginationMeta.build(total, page, limit),
    ))


@router.get("/unread-count", summary="Unread Count")
def get_unread_count(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return success_response({"unreadCount": crud_notification.unread_count(db, user_id=current_user.id)})


@router.get("/types", summary="Notification Types")
def list_notification_types(current_user: User = Depends(get_current_user)):
    types = [NotificationTypeOption(value=t.value, label=NOTIFICATION_TYPE_LABELS[t]) for t in NotificationType]
    return success_response({"types": types})


@router.put("/mark-all-read", summary="Mark All Read")
def mark_all_read(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    updated = crud_notification.mark_all_read(db, user_id=current_user.id)
    return success_response({"updatedCount": updated}, "All notifications marked as read")


@router.put("/{notification_id}/read", summary="Mark Read")
def mark_read(
    notification_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    notification = notification_service.mark_read(db, notification_id, current_user)
    return success_response(
        {"notification": NotificationResponse.model_validate(notification)},
        "Notification marked as read",
    )


@router.put("/{notification_id}/archive", summary="Archive Notification")
def archive_notification(
    notification_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    notification = notification_service.archive(db, notification_id, current_user)
    return success_response(
        {"notification": NotificationResponse.model_validate(notification)},
        "Notification archived",
    )


@router.delete("/{notification_id}", summary="Delete Notification")
def delete_notification(
    notification_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    notification_service.delete_notification(db, notification_id, current_user)
    return success_response(message="Notification deleted")


@router.post("/broadcast", status_code=status.HTTP_201_CREATED, summary="Broadcast Announcement")
def broadcast(
    broadcast_in: BroadcastRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """
    Send an announcement to every user, or to the listed users
    """
    created = notification_service.broadcast(
        db,
        title=broadcast_in.title,
        message=broadcast_in.message,
        created_by=current_user.id,
        type=broadcast_in.type,
        priority=broadcast_in.priority,
        target_user_ids=broadcast_in.target_users,
        expires_in_days=broadcast_in.expires_in,
    )
    audit_service.log_admin_action(
        current_user.id, "broadcast_notification", None, {"title": broadcast_in.title, "recipients": created}
    )
    return success_response(
        BroadcastResult(notifications_created=created),
        f"Broadcast sent to {created} users",
    )
