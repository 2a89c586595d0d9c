"""
CRUD operations for supporting documents
"""

from typing import List, Optional, Tuple
import uuid

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.document import Document
from app.models.enums import DocumentStatus, DocumentType
from app.schemas.document import DocumentStatusUpdate


class CRUDDocument(CRUDBase[Document, DocumentStatusUpdate, DocumentStatusUpdate]):

    def get_by_user(
        self,
        db: Session,
        *,
        user_id: uuid.UUID,
        application_id: Optional[uuid.UUID] = None,
        document_type: Optional[DocumentType] = None
    ) -> List[Document]:
        query = db.query(Document).filter(Document.user_id == user_id)
        if application_id:
            query = query.filter(Document.application_id == application_id)
        if document_type:
            query = query.filter(Document.document_type == document_type)
        return query.order_by(Document.created_at.desc()).all()

    def search_documents(
        self,
        db: Session,
        *,
        status: Optional[DocumentStatus] = None,
        document_type: Optional[DocumentType] = None,
        application_id: Optional[uuid.UUID] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 10
    ) -> Tuple[List[Document], int]:
        query = db.query(Document)
        if status:
            query = query.filter(Document.status == status)
        if document_type:
            query = query.filter(Document.document_type == document_type)
        if application_id:
            query = query.filter(Document.application_id == application_id)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(Document.file_name.ilike(pattern), Document.original_name.ilike(pattern)))
        return self.paginate(query, skip=skip, limit=limit)

    def file_paths_for_users_except(self, db: Session, *, keep_user_id: uuid.UUID) -> List[str]:
        """Stored file paths of every document not owned by keep_user_id"""
        rows = db.query(Document.file_path).filter(Document.user_id != keep_user_id).all()
        return [row[0] for row in rows]


document = CRUDDocument(Document)
