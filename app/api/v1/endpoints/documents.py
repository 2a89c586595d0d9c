"""
Document API Endpoints for the Visa Processing System
Supporting document upload (multipart), listing, review and deletion
"""

from typing import Optional
import uuid

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.orm import Session

from app.api.v1.endpoints.auth import get_current_user, require_staff
from app.core.database import get_db
from app.crud import document as crud_document
from app.models.enums import DocumentStatus, DocumentType
from app.models.user import User
from app.schemas.common import PaginationMeta, success_response, offset_for
from app.schemas.document import (
    DocumentStatusUpdate, DocumentResponse, DocumentDetail, DocumentListPayload, DocumentTypeOption
)
from app.services import document_service
from app.services.file_storage import DocumentFileManager, get_file_manager

router = APIRouter()


@router.get("/", summary="List My Documents")
def list_my_documents(
    application_id: Optional[uuid.UUID] = Query(None, alias="applicationId"),
    document_type: Optional[DocumentType] = Query(None, alias="documentType"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    documents = crud_document.get_by_user(
        db, user_id=current_user.id, application_id=application_id, document_type=document_type
    )
    return success_response(DocumentListPayload(documents=[DocumentDetail.model_validate(d) for d in documents]))


@router.get("/meta/types", summary="Document Types")
def list_document_types():
    types = [
        DocumentTypeOption(value=t.value, label=t.value.replace("_", " ").title())
        for t in DocumentType
    ]
    return success_response({"documentTypes": types})


@router.get("/admin/all", summary="List All Documents (Staff)")
def list_all_documents(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[DocumentStatus] = Query(None),
    document_type: Optional[DocumentType] = Query(None, alias="documentType"),
    application_id: Optional[uuid.UUID] = Query(None, alias="applicationId"),
    search: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    documents, total = crud_document.search_documents(
        db, status=status, document_type=document_type, application_id=application_id, search=search,
        skip=offset_for(page, limit), limit=limit,
    )
    return success_response(DocumentListPayload(
        documents=[DocumentDetail.model_validate(d) for d in documents],
        pagination=PaginationMeta.build(total, page, limit),
    ))


@router.get("/{document_id}", summary="Get Document")
def get_document(
    document_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    document = document_service.get_document_for_user(db, document_id, current_user)
    return success_response({"document": DocumentDetail.model_validate(document)})


@router.post("/", status_code=status.HTTP_201_CREATED, summary="Upload Document")
def upload_document(
    file: UploadFile = File(...),
    document_type: DocumentType = Form(..., alias="documentType"),
    application_id: Optional[uuid.UUID] = Form(None, alias="applicationId"),
    description: Optional[str] = Form(None, max_length=500),
    db: Session = Depends(get_db),
    file_manager: DocumentFileManager = Depends(get_file_manager),
    current_user: User = Depends(get_current_user)
):
    """
    Upload a supporting document, optionally attached to one of the caller's applications
    """
    content = file_manager.read_upload(file.file)
    document = document_service.upload_document(
        db,
        file_manager,
        content=content,
        original_name=file.filename or "upload",
        mime_type=file.content_type,
        document_type=document_type,
        current_user=current_user,
        application_id=application_id,
        description=description,
    )
    return success_response(
        {"document": DocumentResponse.model_validate(document)},
        "Document uploaded successfully",
    )


@router.put("/{document_id}/status", summary="Review Document")
def review_document(
    document_id: uuid.UUID,
    status_in: DocumentStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    document = document_service.review_document(db, document_id, status_in, current_user)
    return success_response(
        {"document": DocumentResponse.model_validate(document)},
        "Document status updated successfully",
    )


@router.delete("/{document_id}", summary="Delete Document")
def delete_document(
    document_id: uuid.UUID,
    db: Session = Depends(get_db),
    file_manager: DocumentFileManager = Depends(get_file_manager),
    current_user: User = Depends(get_current_user)
):
    document_service.delete_document(db, file_manager, document_id, current_user)
    return success_response(message="Document deleted successfully")
