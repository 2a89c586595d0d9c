"""
Biometric Appointment Service
Scheduling, status changes and rescheduling, with their application cascades
"""

import logging
from typing import Any

from sqlalchemy.orm import Session

from app.core.database import transaction_scope
from app.core.exceptions import ConflictError, NotFoundError
from app.crud import biometric_appointment as crud_biometric
from app.models.base import utcnow
from app.models.biometric import BiometricAppointment
from app.models.enums import BiometricStatus
from app.models.user import User
from app.schemas.biometric import BiometricScheduleRequest, BiometricStatusUpdate, BiometricReschedule
from app.services.audit_service import audit_service
from app.services.locks import application_lock
from app.services.transition_executor import (
    TransitionContext, apply_plan, audit_transition, load_for_transition
)
from app.services.workflow import WorkflowAction, authorize, plan_transition

logger = logging.getLogger(__name__)

STATUS_ACTIONS = {
    BiometricStatus.COMPLETED: WorkflowAction.COMPLETE_BIOMETRICS,
    BiometricStatus.CANCELLED: WorkflowAction.CANCEL_BIOMETRICS,
}


def get_appointment(db: Session, appointment_id: Any) -> BiometricAppointment:
    appointment = crud_biometric.get(db, appointment_id)
    if not appointment:
        raise NotFoundError("Appointment not found")
    return appointment


def schedule_appointment(db: Session, obj_in: BiometricScheduleRequest, current_user: User) -> BiometricAppointment:
    """Create the application's single appointment and move it to BIOMETRICS_SCHEDULED"""
    with application_lock(obj_in.application_id), transaction_scope(db):
        application = load_for_transition(db, obj_in.application_id)
        authorize(WorkflowAction.SCHEDULE_BIOMETRICS, current_user.role, application.user_id == current_user.id)
        if crud_biometric.get_by_application(db, application_id=application.id):
            raise ConflictError("Biometric appointment already scheduled for this application")

        plan = plan_transition(
            application.status, WorkflowAction.SCHEDULE_BIOMETRICS, current_user.role,
            application.user_id == current_user.id,
        )
        appointment = crud_biometric.create(
            db,
            obj_in={
                "application_id": application.id,
                "user_id": application.user_id,
                "appointment_date": obj_in.appointment_date,
                "location": obj_in.location,
                "notes": obj_in.notes,
                "status": BiometricStatus.SCHEDULED,
                "scheduled_by": current_user.id,
            },
            commit=False,
        )
        apply_plan(db, application, plan, TransitionContext(actor=current_user, appointment=appointment))

    db.refresh(appointment)
    audit_transition(application, plan, current_user)
    audit_service.log_admin_action(
        current_user.id, "schedule_biometric", application.user_id,
        {"application_id": str(application.id), "appointment_id": str(appointment.id),
         "appointment_date": obj_in.appointment_date.isoformat(), "location": obj_in.location},
    )
    return appointment


def update_appointment_status(
    db: Session, appointment_id: Any, obj_in: BiometricStatusUpdate, current_user: User
) -> BiometricAppointment:
    """
    Change the appointment status.
    COMPLETED cascades the application to BIOMETRICS_COMPLETED and CANCELLED to
    DOCUMENTS_REQUESTED, unless the application is already terminal.
    """
    appointment = get_appointment(db, appointment_id)
    action = STATUS_ACTIONS.get(obj_in.status, WorkflowAction.UPDATE_BIOMETRICS)

    with application_lock(appointment.application_id), transaction_scope(db):
        application = load_for_transition(db, appointment.application_id)
        plan = plan_transition(application.status, action, current_user.role, application.user_id == current_user.id)

        db.refresh(appointment, with_for_update=True)
        old_status = appointment.status
        appointment.status = obj_in.status
        if obj_in.notes:
            appointment.notes = obj_in.notes
        if obj_in.status == BiometricStatus.COMPLETED and old_status != BiometricStatus.COMPLETED:
            appointment.completed_by = current_user.id
            appointment.completed_at = utcnow()
        db.add(appointment)

        apply_plan(db, application, plan, TransitionContext(actor=current_user, appointment=appointment))

    db.refresh(appointment)
    audit_transition(application, plan, current_user)
    audit_service.log_admin_action(
        current_user.id, "update_biometric_status", appointment.user_id,
        {"appointment_id": str(appointment.id), "old_status": old_status.value, "new_status": obj_in.status.value},
    )
    return appointment


def reschedule_appointment(
    db: Session, appointment_id: Any, obj_in: BiometricReschedule, current_user: User
) -> BiometricAppointment:
    """Move a SCHEDULED appointment; the reason is appended to its notes"""
    appointment = get_appointment(db, appointment_id)

    with application_lock(appointment.application_id), transaction_scope(db):
        application = load_for_transition(db, appointment.application_id)
        plan = plan_transition(
            application.status, WorkflowAction.RESCHEDULE_BIOMETRICS, current_user.role,
            application.user_id == current_user.id,
        )
        db.refresh(appointment, with_for_update=True)
        if appointment.status != BiometricStatus.SCHEDULED:
            raise ConflictError("Only scheduled appointments can be rescheduled")

        old_date = appointment.appointment_date
        appointment.appointment_date = obj_in.appointment_date
        appointment.location = obj_in.location or appointment.location
        appointment.status = BiometricStatus.RESCHEDULED
        appointment.notes = f"{appointment.notes or ''}\nRescheduled: {obj_in.reason}".lstrip("\n")
        db.add(appointment)

        apply_plan(db, application, plan, TransitionContext(actor=current_user, appointment=appointment))

    db.refresh(appointment)
    audit_service.log_admin_action(
        current_user.id, "reschedule_biometric", appointment.user_id,
        {"appointment_id": str(appointment.id), "old_date": old_date.isoformat(),
         "new_date": obj_in.appointment_date.isoformat(), "reason": obj_in.reason},
    )
    return appointment
