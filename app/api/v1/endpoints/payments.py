"""
Payment API Endpoints for the Visa Processing System
"""

from datetime import date, datetime
from typing import Optional
import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.v1.endpoints.auth import get_current_user, require_staff
from app.core.database import get_db
from app.crud import payment as crud_payment
from app.models.enums import PaymentStatus, PaymentMethod
from app.models.user import User
from app.schemas.common import PaginationMeta, success_response, offset_for
from app.schemas.payment import (
    PaymentCreate, PaymentStatusUpdate, RefundRequest,
    PaymentResponse, PaymentDetail, PaymentListPayload, RefundPayload
)
from app.services import payment_service

router = APIRouter()


def _start_of_stats_window() -> datetime:
    """First day of the month eleven months back, so the window spans twelve months"""
    today = date.today()
    year, month = today.year, today.month - 11
    if month < 1:
        year, month = year - 1, month + 12
    return datetime(year, month, 1)


@router.get("/", summary="List My Payments")
def list_my_payments(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    payments = crud_payment.get_by_user(db, user_id=current_user.id)
    return success_response(PaymentListPayload(payments=[PaymentDetail.model_validate(p) for p in payments]))


@router.get("/admin/all", summary="List All Payments (Staff)")
def list_all_payments(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[PaymentStatus] = Query(None),
    payment_method: Optional[PaymentMethod] = Query(None, alias="paymentMethod"),
    date_from: Optional[datetime] = Query(None, alias="dateFrom"),
    date_to: Optional[datetime] = Query(None, alias="dateTo"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    payments, total = crud_payment.search_payments(
        db, status=status, payment_method=payment_method, date_from=date_from, date_to=date_to,
        skip=offset_for(page, limit), limit=limit,
    )
    return success_response(PaymentListPayload(
        payments=[PaymentDetail.model_validate(p) for p in payments],
        pagination=PaginationMeta.build(total, page, limit),
    ))


@router.get("/admin/stats", summary="Payment Statistics (Staff)")
def get_payment_stats(db: Session = Depends(get_db), current_user: User = Depends(require_staff)):
    """
    Count and amount per status, and per month over the last twelve months
    """
    return success_response({
        "statusStats": crud_payment.stats_by_status(db),
        "monthlyStats": crud_payment.monthly_totals(db, since=_start_of_stats_window()),
    })


@router.get("/{payment_id}", summary="Get Payment")
def get_payment(
    payment_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    payment = payment_service.get_payment_for_user(db, payment_id, current_user)
    return success_response({"payment": PaymentDetail.model_validate(payment)})


@router.post("/", status_code=status.HTTP_201_CREATED, summary="Create Payment")
def create_payment(
    payment_in: PaymentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Record a pending payment for one of the caller's applications
    """
    payment = payment_service.create_payment(db, payment_in, current_user)
    return success_response(
        {"payment": PaymentResponse.model_validate(payment)},
        "Payment initiated successfully",
    )


@router.put("/{payment_id}/status", summary="Update Payment Status")
def update_payment_status(
    payment_id: uuid.UUID,
    status_in: PaymentStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    payment = payment_service.update_payment_status(db, payment_id, status_in, current_user)
    return success_response(
        {"payment": PaymentResponse.model_validate(payment)},
        "Payment status updated successfully",
    )


@router.post("/{payment_id}/refund", summary="Refund Payment")
def refund_payment(
    payment_id: uuid.UUID,
    refund_in: RefundRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    payment, refund_amount = payment_service.refund_payment(db, payment_id, refund_in, current_user)
    return success_response(
        RefundPayload(
            payment=PaymentResponse.model_validate(payment),
            refund_amount=refund_amount,
            reason=refund_in.reason,
        ),
        "Payment refunded successfully",
    )
