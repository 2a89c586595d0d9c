"""
CRUD operations for biometric appointments
"""

from datetime import datetime
from typing import Dict, List, Optional, Tuple
import uuid

from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.biometric import BiometricAppointment
from app.models.enums import BiometricStatus
from app.schemas.biometric import BiometricScheduleRequest, BiometricStatusUpdate


class CRUDBiometricAppointment(CRUDBase[BiometricAppointment, BiometricScheduleRequest, BiometricStatusUpdate]):

    def get_by_application(self, db: Session, *, application_id: uuid.UUID) -> Optional[BiometricAppointment]:
        return db.query(BiometricAppointment).filter(BiometricAppointment.application_id == application_id).first()

    def get_by_user(self, db: Session, *, user_id: uuid.UUID) -> List[BiometricAppointment]:
        return (
            db.query(BiometricAppointment)
            .filter(BiometricAppointment.user_id == user_id)
            .order_by(BiometricAppointment.appointment_date.asc())
            .all()
        )

    def search_appointments(
        self,
        db: Session,
        *,
        status: Optional[BiometricStatus] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        skip: int = 0,
        limit: int = 10
    ) -> Tuple[List[BiometricAppointment], int]:
        query = db.query(BiometricAppointment)
        if status:
            query = query.filter(BiometricAppointment.status == status)
        if date_from:
            query = query.filter(BiometricAppointment.appointment_date >= date_from)
        if date_to:
            query = query.filter(BiometricAppointment.appointment_date <= date_to)
        total = query.count()
        rows = query.order_by(BiometricAppointment.appointment_date.asc()).offset(skip).limit(limit).all()
        return rows, total

    def count_by_status(
        self, db: Session, *, date_from: Optional[datetime] = None, date_to: Optional[datetime] = None
    ) -> Dict[str, int]:
        criteria = []
        if date_from:
            criteria.append(BiometricAppointment.appointment_date >= date_from)
        if date_to:
            criteria.append(BiometricAppointment.appointment_date < date_to)
        return self.count_grouped(db, BiometricAppointment.status, *criteria)


biometric_appointment = CRUDBiometricAppointment(BiometricAppointment)
