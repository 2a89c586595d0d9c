"""
Document Schemas for the Visa Processing System API
Uploads arrive as multipart form data; only the review action takes a JSON body
"""

from pydantic import Field, model_validator
from typing import Optional, List
from datetime import datetime
import uuid

from app.models.enums import DocumentType, DocumentStatus, VisaType
from app.schemas.common import CamelModel, RequestModel, PaginationMeta
from app.schemas.user import UserSummary


class DocumentStatusUpdate(RequestModel):
    status: DocumentStatus
    rejection_reason: Optional[str] = Field(None, max_length=500)
    verification_notes: Optional[str] = Field(None, max_length=500)

    @model_validator(mode="after")
    def strip_reason(self):
        if self.rejection_reason is not None:
            self.rejection_reason = self.rejection_reason.strip() or None
        return self


class DocumentApplication(CamelModel):
    id: uuid.UUID
    application_number: str
    visa_type: VisaType


class DocumentResponse(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    application_id: Optional[uuid.UUID] = None
    document_type: DocumentType
    file_name: str
    original_name: str
    file_size: int
    mime_type: str
    description: Optional[str] = None
    status: DocumentStatus
    rejection_reason: Optional[str] = None
    verification_notes: Optional[str] = None
    verified_at: Optional[datetime] = None
    reviewed_by: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime


class DocumentDetail(DocumentResponse):
    application: Optional[DocumentApplication] = None
    user: Optional[UserSummary] = None


class DocumentListPayload(CamelModel):
    documents: List[DocumentDetail]
    pagination: Optional[PaginationMeta] = None


class DocumentTypeOption(CamelModel):
    value: str
    label: str
