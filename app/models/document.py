"""
Supporting Document Model
A stored file scoped to a user and optionally an application
"""

from sqlalchemy import Column, String, DateTime, Text, Integer, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from app.models.base import BaseModel, EnumValueType
from app.models.enums import DocumentType, DocumentStatus


class Document(BaseModel):
    """Uploaded supporting document with its own review status"""
    __tablename__ = "documents"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    application_id = Column(Uuid(as_uuid=True), ForeignKey("applications.id", ondelete="CASCADE"), nullable=True, index=True)

    document_type = Column(EnumValueType(DocumentType, 40), nullable=False)
    file_name = Column(String(255), nullable=False, comment="Stored file name")
    original_name = Column(String(255), nullable=False, comment="Client supplied file name")
    file_path = Column(String(500), nullable=False)
    file_size = Column(Integer, nullable=False)
    mime_type = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)

    status = Column(EnumValueType(DocumentStatus, 20), nullable=False, default=DocumentStatus.PENDING, index=True)
    rejection_reason = Column(Text, nullable=True)
    verification_notes = Column(Text, nullable=True)
    verified_at = Column(DateTime(timezone=True), nullable=True)
    reviewed_by = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    user = relationship("User", foreign_keys=[user_id], back_populates="documents")
    application = relationship("Application", back_populates="documents")

    def __repr__(self):
        return f"<Document(type='{self.document_type}', status='{self.status}')>"
