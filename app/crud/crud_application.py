"""
CRUD operations for visa applications
"""

from typing import List, Optional, Tuple
import random
import threading
import time
import uuid

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.application import Application
from app.models.enums import ApplicationStatus, VisaType
from app.schemas.application import ApplicationCreate, ApplicationUpdate


class ApplicationNumberGenerator:
    """
    Generates VISA-<epoch ms>-<0..999>.
    The millisecond component is strictly increasing within the process, so two
    numbers from the same process never collide.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._last_ms = 0

    def next(self) -> str:
        with self._lock:
            now_ms = int(time.time() * 1000)
            if now_ms <= self._last_ms:
                now_ms = self._last_ms + 1
            self._last_ms = now_ms
        return f"VISA-{now_ms}-{random.randint(0, 999)}"


application_numbers = ApplicationNumberGenerator()


class CRUDApplication(CRUDBase[Application, ApplicationCreate, ApplicationUpdate]):
    """Application storage and queries"""

    def create_for_user(self, db: Session, *, obj_in: ApplicationCreate, user_id: uuid.UUID) -> Application:
        """Insert a new DRAFT application owned by user_id"""
        data = obj_in.model_dump(exclude_unset=True, exclude={"full_name"})
        data["first_name"] = obj_in.first_name
        data["last_name"] = obj_in.last_name
        return self.create(
            db,
            obj_in=data,
            user_id=user_id,
            application_number=application_numbers.next(),
            status=ApplicationStatus.DRAFT,
        )

    def get_by_user(
        self, db: Session, *, user_id: uuid.UUID, status: Optional[ApplicationStatus] = None
    ) -> List[Application]:
        query = db.query(Application).filter(Application.user_id == user_id)
        if status:
            query = query.filter(Application.status == status)
        return query.order_by(Application.created_at.desc()).all()

    def search_applications(
        self,
        db: Session,
        *,
        status: Optional[ApplicationStatus] = None,
        visa_type: Optional[VisaType] = None,
        assigned_officer_id: Optional[uuid.UUID] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 10
    ) -> Tuple[List[Application], int]:
        query = db.query(Application)
        if status:
            query = query.filter(Application.status == status)
        if visa_type:
            query = query.filter(Application.visa_type == visa_type)
        if assigned_officer_id:
            query = query.filter(Application.assigned_officer_id == assigned_officer_id)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                Application.application_number.ilike(pattern),
                Application.passport_number.ilike(pattern),
                Application.first_name.ilike(pattern),
                Application.last_name.ilike(pattern),
            ))
        return self.paginate(query, skip=skip, limit=limit)

    def recent(self, db: Session, *, limit: int = 5) -> List[Application]:
        return db.query(Application).order_by(Application.created_at.desc()).limit(limit).all()

    def count_by_visa_type(self, db: Session) -> dict:
        return self.count_grouped(db, Application.visa_type)

    def count_by_status(self, db: Session) -> dict:
        return self.count_grouped(db, Application.status)

    def recent_for_user(self, db: Session, *, user_id: uuid.UUID, limit: int = 5) -> List[Application]:
        return (
            db.query(Application)
            .filter(Application.user_id == user_id)
            .order_by(Application.updated_at.desc())
            .limit(limit)
            .all()
        )


application = CRUDApplication(Application)
