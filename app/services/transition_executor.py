"""
Transition executor
Applies a TransitionPlan to an application inside the caller's transaction

The executor only flushes. Callers wrap it in transaction_scope() so the
status write, timestamps, fee fields and notifications commit together.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, date
from decimal import Decimal
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.crud import application as crud_application
from app.models.application import Application
from app.models.base import utcnow
from app.models.biometric import BiometricAppointment
from app.models.enums import ApplicationStatus, NotificationType, NotificationPriority
from app.models.user import User
from app.services.audit_service import audit_service
from app.services.notification_service import create_notifications, notify_active_admins
from app.services.workflow import SideEffect, TransitionPlan, STATUS_TIMESTAMP_COLUMNS

logger = logging.getLogger(__name__)


@dataclass
class TransitionContext:
    """Inputs some side effects need beyond the application itself"""
    actor: User
    note: Optional[str] = None
    officer: Optional[User] = None
    fees: Optional[Dict[str, Decimal]] = None
    payment_deadline: Optional[date] = None
    appointment: Optional[BiometricAppointment] = None


def status_label(status: ApplicationStatus) -> str:
    return status.value.replace("_", " ").upper()


def load_for_transition(db: Session, application_id: Any) -> Application:
    """Re-read the application under a row lock, raising NotFoundError when absent"""
    application = crud_application.get_for_update(db, application_id)
    if not application:
        raise NotFoundError("Application not found")
    return application


def append_processing_note(application: Application, content: str, author: User) -> Dict[str, str]:
    entry = {
        "content": content,
        "created_by": str(author.id),
        "created_by_name": author.full_name,
        "created_at": utcnow().isoformat(),
    }
    # Reassign so the JSON column is flagged dirty
    application.processing_notes = [*(application.processing_notes or []), entry]
    return entry


def assign_officer(application: Application, officer: User) -> None:
    application.assigned_officer_id = officer.id
    application.assigned_at = utcnow()


def apply_plan(db: Session, application: Application, plan: TransitionPlan, ctx: TransitionContext) -> Application:
    """Write the planned status and run every side effect, then flush"""
    if plan.cascade_skipped:
        logger.warning(
            f"Application {application.application_number} is {application.status.value}; "
            f"{plan.action.value} leaves its status unchanged"
        )

    if plan.changes_status:
        application.status = plan.next_status

    for effect in plan.effects:
        _EFFECT_HANDLERS[effect](db, application, plan, ctx)

    db.add(application)
    db.flush()
    return application


def audit_transition(application: Application, plan: TransitionPlan, actor: User) -> None:
    """Record a committed status change"""
    if plan.changes_status:
        audit_service.log_application_status_change(
            application.id, plan.current_status, plan.next_status, actor.id, trigger=plan.action.value
        )


# Effect handlers

def _stamp_submitted(db, application, plan, ctx):
    application.submitted_at = utcnow()


def _stamp_status_timestamp(db, application, plan, ctx):
    setattr(application, STATUS_TIMESTAMP_COLUMNS[plan.next_status], utcnow())


def _stamp_biometrics_date(db, application, plan, ctx):
    application.biometrics_date = ctx.appointment.appointment_date if ctx.appointment else utcnow()


def _record_fees(db, application, plan, ctx):
    fees = ctx.fees or {}
    application.processing_fee = fees.get("processing_fee")
    application.biometrics_fee = fees.get("biometrics_fee")
    application.service_fee = fees.get("service_fee")
    application.courier_fee = fees.get("courier_fee")
    application.total_cost = fees.get("total_cost")
    application.payment_deadline = ctx.payment_deadline
    application.cost_provided_at = utcnow()


def _assign_officer(db, application, plan, ctx):
    assign_officer(application, ctx.officer)


def _append_note(db, application, plan, ctx):
    append_processing_note(application, ctx.note, ctx.actor)


def _notify_admins_submitted(db, application, plan, ctx):
    notify_active_admins(
        db,
        type=NotificationType.APPLICATION_STATUS_UPDATE,
        title="New Application Submitted for Review",
        message=(
            f"A new visa application ({application.application_number}) has been submitted "
            f"and requires your review."
        ),
        priority=NotificationPriority.HIGH,
        application_id=application.id,
        created_by=ctx.actor.id,
    )


def _notify_owner(db, application, ctx, type, title, message, priority=NotificationPriority.MEDIUM):
    create_notifications(
        db, [application.user_id],
        type=type, title=title, message=message, priority=priority,
        application_id=application.id, created_by=ctx.actor.id,
    )


def _notify_owner_status(db, application, plan, ctx):
    _notify_owner(
        db, application, ctx,
        NotificationType.APPLICATION_STATUS_UPDATE,
        "Application Status Updated",
        f"Your visa application status has been updated to: {status_label(plan.next_status)}",
    )


def _notify_owner_farewell(db, application, plan, ctx):
    owner = application.user
    outcome = "your visa has been issued!" if plan.next_status == ApplicationStatus.ISSUED else "marked as completed!"
    subject = "Congratulations! Your Visa Application is Complete!"
    _notify_owner(
        db, application, ctx,
        NotificationType.FAREWELL,
        subject,
        (
            f"Dear {owner.first_name}, your visa application ({application.application_number}) "
            f"has been successfully processed and {outcome} We wish you a pleasant journey!"
        ),
        NotificationPriority.HIGH,
    )
    # Email delivery is simulated
    logger.info(
        f"Farewell email to {owner.full_name} <{owner.email}>: {subject} "
        f"(application {application.application_number}, visa type {application.visa_type.value}, "
        f"destination {application.destination_country or 'N/A'})"
    )
    audit_service.log_email_sent(owner.email, subject, "farewell", related_id=application.id)


def _notify_owner_cost(db, application, plan, ctx):
    _notify_owner(
        db, application, ctx,
        NotificationType.COST_ESTIMATION,
        "Cost Details Provided",
        "The visa cost breakdown has been sent to your email. Please review and proceed with payment.",
        NotificationPriority.HIGH,
    )


def _format_appointment(appointment: Optional[BiometricAppointment]) -> str:
    when: Optional[datetime] = appointment.appointment_date if appointment else None
    return when.strftime("%Y-%m-%d %H:%M") if when else "the scheduled date"


def _notify_owner_biometrics_scheduled(db, application, plan, ctx):
    _notify_owner(
        db, application, ctx,
        NotificationType.BIOMETRICS_SCHEDULED,
        "Biometric Appointment Scheduled",
        (
            f"Your biometric appointment has been scheduled for {_format_appointment(ctx.appointment)} "
            f"at {ctx.appointment.location if ctx.appointment else 'the processing center'}"
        ),
        NotificationPriority.HIGH,
    )


def _notify_owner_biometrics_rescheduled(db, application, plan, ctx):
    _notify_owner(
        db, application, ctx,
        NotificationType.BIOMETRICS_RESCHEDULED,
        "Biometric Appointment Rescheduled",
        f"Your biometric appointment has been rescheduled to {_format_appointment(ctx.appointment)}",
        NotificationPriority.HIGH,
    )


def _notify_owner_payment_completed(db, application, plan, ctx):
    _notify_owner(
        db, application, ctx,
        NotificationType.PAYMENT_COMPLETED,
        "Payment Received",
        f"Your payment for application {application.application_number} has been confirmed.",
    )


def _notify_officer_assignment(db, application, plan, ctx):
    create_notifications(
        db, [ctx.officer.id],
        type=NotificationType.ASSIGNMENT,
        title="New Application Assigned",
        message=f"You have been assigned to application {application.application_number}",
        priority=NotificationPriority.HIGH,
        application_id=application.id,
        created_by=ctx.actor.id,
    )


_EFFECT_HANDLERS = {
    SideEffect.STAMP_SUBMITTED: _stamp_submitted,
    SideEffect.STAMP_STATUS_TIMESTAMP: _stamp_status_timestamp,
    SideEffect.STAMP_BIOMETRICS_DATE: _stamp_biometrics_date,
    SideEffect.RECORD_FEES: _record_fees,
    SideEffect.ASSIGN_OFFICER: _assign_officer,
    SideEffect.APPEND_NOTE: _append_note,
    SideEffect.NOTIFY_ADMINS_SUBMITTED: _notify_admins_submitted,
    SideEffect.NOTIFY_OWNER_STATUS: _notify_owner_status,
    SideEffect.NOTIFY_OWNER_FAREWELL: _notify_owner_farewell,
    SideEffect.NOTIFY_OWNER_COST: _notify_owner_cost,
    SideEffect.NOTIFY_OWNER_BIOMETRICS_SCHEDULED: _notify_owner_biometrics_scheduled,
    SideEffect.NOTIFY_OWNER_BIOMETRICS_RESCHEDULED: _notify_owner_biometrics_rescheduled,
    SideEffect.NOTIFY_OWNER_PAYMENT_COMPLETED: _notify_owner_payment_completed,
    SideEffect.NOTIFY_OFFICER_ASSIGNMENT: _notify_officer_assignment,
}
