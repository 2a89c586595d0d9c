"""
CRUD operations for notifications
"""

from typing import List, Optional, Tuple
import uuid

from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.base import utcnow
from app.models.enums import NotificationStatus, NotificationType
from app.models.notification import Notification
from app.schemas.notification import BroadcastRequest


class CRUDNotification(CRUDBase[Notification, BroadcastRequest, BroadcastRequest]):

    def get_for_user(self, db: Session, *, id: uuid.UUID, user_id: uuid.UUID) -> Optional[Notification]:
        return db.query(Notification).filter(Notification.id == id, Notification.user_id == user_id).first()

    def list_for_user(
        self,
        db: Session,
        *,
        user_id: uuid.UUID,
        status: Optional[NotificationStatus] = None,
        type: Optional[NotificationType] = None,
        skip: int = 0,
        limit: int = 20
    ) -> Tuple[List[Notification], int]:
        query = db.query(Notification).filter(Notification.user_id == user_id)
        if status:
            query = query.filter(Notification.status == status)
        if type:
            query = query.filter(Notification.type == type)
        return self.paginate(query, skip=skip, limit=limit)

    def unread_count(self, db: Session, *, user_id: uuid.UUID) -> int:
        return db.query(Notification).filter(
            Notification.user_id == user_id,
            Notification.status == NotificationStatus.UNREAD,
        ).count()

    def mark_all_read(self, db: Session, *, user_id: uuid.UUID) -> int:
        updated = db.query(Notification).filter(
            Notification.user_id == user_id,
            Notification.status == NotificationStatus.UNREAD,
        ).update(
            {Notification.status: NotificationStatus.READ, Notification.read_at: utcnow()},
            synchronize_session=False,
        )
        db.commit()
        return updated


notification = CRUDNotification(Notification)
