"""
Notification Model
Pure side-effect record addressed to one user
"""

from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from app.models.base import BaseModel, EnumValueType
from app.models.enums import NotificationType, NotificationStatus, NotificationPriority


class Notification(BaseModel):
    __tablename__ = "notifications"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    application_id = Column(Uuid(as_uuid=True), ForeignKey("applications.id", ondelete="CASCADE"), nullable=True, index=True)

    type = Column(EnumValueType(NotificationType, 40), nullable=False, default=NotificationType.SYSTEM_NOTIFICATION)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    status = Column(EnumValueType(NotificationStatus, 20), nullable=False, default=NotificationStatus.UNREAD, index=True)
    priority = Column(EnumValueType(NotificationPriority, 20), nullable=False, default=NotificationPriority.MEDIUM)
    action_url = Column(String(500), nullable=True)

    read_at = Column(DateTime(timezone=True), nullable=True)
    archived_at = Column(DateTime(timezone=True), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    created_by = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    user = relationship("User", foreign_keys=[user_id], back_populates="notifications")
    application = relationship("Application", back_populates="notifications")

    def __repr__(self):
        return f"<Notification(type='{self.type}', user_id={self.user_id})>"
