"""
CRUD operations for payments
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple
import uuid

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.enums import PaymentMethod, PaymentStatus
from app.models.payment import Payment
from app.schemas.payment import PaymentCreate, PaymentStatusUpdate


class CRUDPayment(CRUDBase[Payment, PaymentCreate, PaymentStatusUpdate]):

    def get_by_application(self, db: Session, *, application_id: uuid.UUID) -> Optional[Payment]:
        return db.query(Payment).filter(Payment.application_id == application_id).first()

    def get_by_user(self, db: Session, *, user_id: uuid.UUID) -> List[Payment]:
        return db.query(Payment).filter(Payment.user_id == user_id).order_by(Payment.created_at.desc()).all()

    def search_payments(
        self,
        db: Session,
        *,
        status: Optional[PaymentStatus] = None,
        payment_method: Optional[PaymentMethod] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        skip: int = 0,
        limit: int = 10
    ) -> Tuple[List[Payment], int]:
        query = db.query(Payment)
        if status:
            query = query.filter(Payment.status == status)
        if payment_method:
            query = query.filter(Payment.payment_method == payment_method)
        if date_from:
            query = query.filter(Payment.created_at >= date_from)
        if date_to:
            query = query.filter(Payment.created_at <= date_to)
        return self.paginate(query, skip=skip, limit=limit)

    def total_revenue(self, db: Session) -> Decimal:
        total = db.query(func.sum(Payment.amount)).filter(Payment.status == PaymentStatus.COMPLETED).scalar()
        return Decimal(total) if total is not None else Decimal("0")

    def recent(self, db: Session, *, limit: int = 5) -> List[Payment]:
        return db.query(Payment).order_by(Payment.created_at.desc()).limit(limit).all()

    def stats_by_status(self, db: Session) -> Dict[str, Dict[str, Any]]:
        """Count and summed amount per payment status"""
        rows = (
            db.query(Payment.status, func.count(Payment.id), func.sum(Payment.amount))
            .group_by(Payment.status)
            .all()
        )
        return {
            status.value: {"count": count, "totalAmount": Decimal(str(total or 0))}
            for status, count, total in rows
        }

    def monthly_totals(
        self, db: Session, *, since: Optional[datetime] = None, status: Optional[PaymentStatus] = None
    ) -> List[Dict[str, Any]]:
        """Count and summed amount per YYYY-MM of created_at, oldest first"""
        query = db.query(Payment.created_at, Payment.amount)
        if since:
            query = query.filter(Payment.created_at >= since)
        if status:
            query = query.filter(Payment.status == status)
        buckets: Dict[str, Dict[str, Any]] = {}
        for created_at, amount in query.all():
            bucket = buckets.setdefault(created_at.strftime("%Y-%m"), {"count": 0, "totalAmount": Decimal("0")})
            bucket["count"] += 1
            bucket["totalAmount"] += Decimal(str(amount))
        return [{"month": month, **values} for month, values in sorted(buckets.items())]


payment = CRUDPayment(Payment)
