"""
Notification Schemas for the Visa Processing System API
"""

from pydantic import Field, validator
from typing import Optional, List
from datetime import datetime
import uuid

from app.models.enums import NotificationType, NotificationStatus, NotificationPriority
from app.schemas.common import CamelModel, RequestModel, PaginationMeta


class BroadcastRequest(RequestModel):
    """Admin announcement to every user or to an explicit list"""
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=1000)
    priority: NotificationPriority = NotificationPriority.MEDIUM
    type: NotificationType = NotificationType.GENERAL_ANNOUNCEMENT
    target_users: Optional[List[uuid.UUID]] = None
    expires_in: Optional[int] = Field(None, ge=1, le=365, description="Days until the announcement expires")

    @validator('title', 'message')
    def strip_text(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Value must not be blank')
        return v


class NotificationResponse(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    application_id: Optional[uuid.UUID] = None
    type: NotificationType
    title: str
    message: str
    status: NotificationStatus
    priority: NotificationPriority
    action_url: Optional[str] = None
    read_at: Optional[datetime] = None
    archived_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    created_by: Optional[uuid.UUID] = None
    created_at: datetime


class NotificationListPayload(CamelModel):
    notifications: List[NotificationResponse]
    pagination: PaginationMeta


class NotificationTypeOption(CamelModel):
    value: str
    label: str


class BroadcastResult(CamelModel):
    notifications_created: int
