"""
Document Service
Upload, review and deletion of supporting documents
"""

import logging
from typing import Any, Optional
import uuid

from sqlalchemy.orm import Session

from app.core.database import transaction_scope
from app.core.exceptions import AuthorizationError, NotFoundError
from app.crud import application as crud_application, document as crud_document
from app.models.base import utcnow
from app.models.document import Document
from app.models.enums import DocumentStatus, DocumentType, NotificationType, NotificationPriority
from app.models.user import User
from app.schemas.document import DocumentStatusUpdate
from app.services.audit_service import audit_service
from app.services.file_storage import DocumentFileManager
from app.services.notification_service import create_notifications
from app.services.workflow import WorkflowAction, authorize

logger = logging.getLogger(__name__)


def get_document_for_user(db: Session, document_id: Any, current_user: User) -> Document:
    document = crud_document.get(db, document_id)
    if not document:
        raise NotFoundError("Document not found")
    if document.user_id != current_user.id and not current_user.is_staff:
        raise AuthorizationError("Not authorized to access this document")
    return document


def upload_document(
    db: Session,
    file_manager: DocumentFileManager,
    *,
    content: bytes,
    original_name: str,
    mime_type: str,
    document_type: DocumentType,
    current_user: User,
    application_id: Optional[uuid.UUID] = None,
    description: Optional[str] = None,
) -> Document:
    """Store the file and its record; an application, when given, must belong to the caller"""
    if application_id:
        application = crud_application.get(db, application_id)
        if not application or application.user_id != current_user.id:
            raise NotFoundError("Application not found")

    stored = file_manager.save(content, original_name, mime_type)
    try:
        document = crud_document.create(
            db,
            obj_in={
                "user_id": current_user.id,
                "application_id": application_id,
                "document_type": document_type,
                "file_name": stored.file_name,
                "original_name": stored.original_name,
                "file_path": stored.file_path,
                "file_size": stored.file_size,
                "mime_type": stored.mime_type,
                "status": DocumentStatus.PENDING,
                "description": description,
            },
        )
    except Exception:
        db.rollback()
        file_manager.delete(stored.file_path)
        raise

    audit_service.log_file_upload(current_user.id, original_name, stored.file_size, document.id)
    audit_service.log_user_action(
        current_user.id, "upload_document",
        {"document_id": str(document.id), "document_type": document_type.value},
    )
    return document


def review_document(db: Session, document_id: Any, obj_in: DocumentStatusUpdate, current_user: User) -> Document:
    """Staff approve/reject; the owner is notified of the decision"""
    document = crud_document.get(db, document_id)
    if not document:
        raise NotFoundError("Document not found")
    authorize(WorkflowAction.REVIEW_DOCUMENT, current_user.role, document.user_id == current_user.id)

    with transaction_scope(db):
        document.status = obj_in.status
        document.reviewed_by = current_user.id
        if obj_in.verification_notes:
            document.verification_notes = obj_in.verification_notes
        if obj_in.status == DocumentStatus.REJECTED:
            document.rejection_reason = obj_in.rejection_reason
        elif obj_in.status == DocumentStatus.APPROVED:
            document.verified_at = utcnow()
            document.rejection_reason = None
        db.add(document)

        label = document.document_type.value.replace("_", " ")
        if obj_in.status == DocumentStatus.APPROVED:
            create_notifications(
                db, [document.user_id],
                type=NotificationType.DOCUMENT_APPROVED,
                title="Document Approved",
                message=f"Your {label} has been approved.",
                priority=NotificationPriority.MEDIUM,
                application_id=document.application_id,
                created_by=current_user.id,
            )
        elif obj_in.status == DocumentStatus.REJECTED:
            create_notifications(
                db, [document.user_id],
                type=NotificationType.DOCUMENT_REJECTED,
                title="Document Rejected",
                message=f"Your {label} was rejected. Reason: {obj_in.rejection_reason or 'No reason provided'}",
                priority=NotificationPriority.HIGH,
                application_id=document.application_id,
                created_by=current_user.id,
            )

    db.refresh(document)
    audit_service.log_document_reviewed(document.id, obj_in.status, current_user.id, obj_in.rejection_reason)
    return document


def delete_document(db: Session, file_manager: DocumentFileManager, document_id: Any, current_user: User) -> None:
    """Owner or admin; removes the stored file along with the record"""
    document = crud_document.get(db, document_id)
    if not document:
        raise NotFoundError("Document not found")
    if document.user_id != current_user.id and not current_user.is_admin:
        raise AuthorizationError("Not authorized to delete this document")

    file_path = document.file_path
    crud_document.remove(db, id=document.id)
    file_manager.delete(file_path)
    audit_service.log_user_action(current_user.id, "delete_document", {"document_id": str(document_id)})
