"""
Payment Service
Bookkeeping for application fees and the payment cascades into the application
"""

import logging
from decimal import Decimal
from typing import Any, Tuple

from sqlalchemy.orm import Session

from app.core.database import transaction_scope
from app.core.exceptions import AuthorizationError, ConflictError, NotFoundError
from app.crud import payment as crud_payment
from app.models.base import utcnow
from app.models.enums import PaymentStatus
from app.models.payment import Payment
from app.models.user import User
from app.schemas.payment import PaymentCreate, PaymentStatusUpdate, RefundRequest
from app.services.audit_service import audit_service
from app.services.locks import application_lock
from app.services.transition_executor import (
    TransitionContext, apply_plan, audit_transition, load_for_transition
)
from app.services.workflow import WorkflowAction, authorize, plan_transition

logger = logging.getLogger(__name__)


def get_payment(db: Session, payment_id: Any) -> Payment:
    payment = crud_payment.get(db, payment_id)
    if not payment:
        raise NotFoundError("Payment not found")
    return payment


def get_payment_for_user(db: Session, payment_id: Any, current_user: User) -> Payment:
    payment = get_payment(db, payment_id)
    if payment.user_id != current_user.id and not current_user.is_staff:
        raise AuthorizationError("Not authorized to access this payment")
    return payment


def create_payment(db: Session, obj_in: PaymentCreate, current_user: User) -> Payment:
    """
    Record a pending payment for the caller's own application.
    An application in COST_PROVIDED moves to PAYMENT_PENDING.
    """
    with application_lock(obj_in.application_id), transaction_scope(db):
        application = load_for_transition(db, obj_in.application_id)
        plan = plan_transition(
            application.status, WorkflowAction.CREATE_PAYMENT, current_user.role,
            application.user_id == current_user.id,
        )
        if crud_payment.get_by_application(db, application_id=application.id):
            raise ConflictError("Payment already exists for this application")

        payment = crud_payment.create(
            db,
            obj_in={
                "application_id": application.id,
                "user_id": current_user.id,
                "amount": obj_in.amount,
                "currency": obj_in.currency,
                "payment_method": obj_in.payment_method,
                "status": PaymentStatus.PENDING,
                "description": obj_in.description or f"Payment for {application.visa_type.value} visa application",
                "transaction_id": obj_in.transaction_id,
            },
            commit=False,
        )
        apply_plan(db, application, plan, TransitionContext(actor=current_user))

    db.refresh(payment)
    logger.info(f"Payment initiated for application {application.id} by user {current_user.id}")
    audit_transition(application, plan, current_user)
    return payment


def update_payment_status(
    db: Session, payment_id: Any, obj_in: PaymentStatusUpdate, current_user: User
) -> Payment:
    """
    Staff status change.
    COMPLETED stamps the processor and cascades PAYMENT_PENDING -> PAYMENT_COMPLETED.
    """
    payment = get_payment(db, payment_id)
    action = WorkflowAction.COMPLETE_PAYMENT if obj_in.status == PaymentStatus.COMPLETED else WorkflowAction.UPDATE_PAYMENT

    with application_lock(payment.application_id), transaction_scope(db):
        application = load_for_transition(db, payment.application_id)
        plan = plan_transition(application.status, action, current_user.role, application.user_id == current_user.id)

        old_status = payment.status
        payment.status = obj_in.status
        if obj_in.transaction_id:
            payment.transaction_id = obj_in.transaction_id
        if obj_in.notes:
            payment.notes = obj_in.notes
        if obj_in.status == PaymentStatus.COMPLETED and old_status != PaymentStatus.COMPLETED:
            payment.processed_by = current_user.id
            payment.processed_at = utcnow()
        db.add(payment)

        apply_plan(db, application, plan, TransitionContext(actor=current_user))

    db.refresh(payment)
    logger.info(f"Payment {payment.id} status updated to {obj_in.status.value} by user {current_user.id}")
    audit_transition(application, plan, current_user)
    audit_service.log_payment_processed(payment.id, obj_in.status, current_user.id, payment.amount)
    return payment


def refund_payment(
    db: Session, payment_id: Any, obj_in: RefundRequest, current_user: User
) -> Tuple[Payment, Decimal]:
    """Refund a COMPLETED payment; returns the payment and the refunded amount"""
    payment = get_payment(db, payment_id)
    authorize(WorkflowAction.REFUND_PAYMENT, current_user.role, payment.user_id == current_user.id)

    with application_lock(payment.application_id), transaction_scope(db):
        db.refresh(payment, with_for_update=True)
        if payment.status != PaymentStatus.COMPLETED:
            raise ConflictError("Only completed payments can be refunded")

        refund_amount = obj_in.amount if obj_in.amount is not None else payment.amount
        payment.status = PaymentStatus.REFUNDED
        payment.notes = f"Refunded: {obj_in.reason}. Amount: {refund_amount} {payment.currency.value}"
        db.add(payment)
        db.flush()

    db.refresh(payment)
    logger.info(f"Payment {payment.id} refunded by admin {current_user.id}. Reason: {obj_in.reason}")
    audit_service.log_payment_processed(payment.id, PaymentStatus.REFUNDED, current_user.id, refund_amount)
    return payment, refund_amount
