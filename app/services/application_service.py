"""
Application Workflow Service
Every application-level transition: validate with the workflow table, apply with
the executor, commit once

Each transition holds the application's in-process mutex and re-reads the row
with SELECT ... FOR UPDATE, so the status precondition is always evaluated
against the latest committed state.
"""

import logging
from datetime import timedelta
from typing import Any, Dict

from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import transaction_scope
from app.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.crud import application as crud_application, user as crud_user
from app.models.application import Application
from app.models.base import utcnow
from app.models.enums import ApplicationStatus
from app.models.user import User
from app.schemas.application import (
    ApplicationCreate, ApplicationUpdate, ApplicationStatusUpdate, CostEstimationRequest
)
from app.services.audit_service import audit_service
from app.services.locks import application_lock
from app.services.transition_executor import (
    TransitionContext, apply_plan, append_processing_note, assign_officer,
    audit_transition, load_for_transition
)
from app.services.workflow import WorkflowAction, plan_transition

logger = logging.getLogger(__name__)
settings = get_settings()


def is_owner(application: Application, user: User) -> bool:
    return application.user_id == user.id


def get_application_for_user(db: Session, application_id: Any, current_user: User) -> Application:
    """Owner or staff read access"""
    application = crud_application.get(db, application_id)
    if not application:
        raise NotFoundError("Application not found")
    if not is_owner(application, current_user) and not current_user.is_staff:
        raise AuthorizationError("Not authorized to access this application")
    return application


def get_application(db: Session, application_id: Any) -> Application:
    application = crud_application.get(db, application_id)
    if not application:
        raise NotFoundError("Application not found")
    return application


def create_application(db: Session, obj_in: ApplicationCreate, current_user: User) -> Application:
    """New DRAFT application owned by the caller"""
    application = crud_application.create_for_user(db, obj_in=obj_in, user_id=current_user.id)
    logger.info(f"New application created: {application.application_number} by user {current_user.id}")
    audit_service.log_user_action(
        current_user.id, "create_application",
        {"application_id": str(application.id), "visa_type": application.visa_type.value},
    )
    return application


def update_application(
    db: Session, application_id: Any, obj_in: ApplicationUpdate, current_user: User
) -> Application:
    """Allow-listed field merge; the status never changes here"""
    with application_lock(application_id), transaction_scope(db):
        application = load_for_transition(db, application_id)
        plan = plan_transition(
            application.status, WorkflowAction.UPDATE_FIELDS, current_user.role, is_owner(application, current_user)
        )
        crud_application.update(db, db_obj=application, obj_in=obj_in, commit=False)
        apply_plan(db, application, plan, TransitionContext(actor=current_user))

    db.refresh(application)
    logger.info(f"Application {application.application_number} updated by user {current_user.id}")
    return application


def submit_application(db: Session, application_id: Any, current_user: User) -> Application:
    with application_lock(application_id), transaction_scope(db):
        application = load_for_transition(db, application_id)
        plan = plan_transition(
            application.status, WorkflowAction.SUBMIT, current_user.role, is_owner(application, current_user)
        )
        apply_plan(db, application, plan, TransitionContext(actor=current_user))

    db.refresh(application)
    logger.info(f"Application {application.application_number} submitted by user {current_user.id}")
    audit_transition(application, plan, current_user)
    return application


def cancel_application(db: Session, application_id: Any, current_user: User) -> Application:
    with application_lock(application_id), transaction_scope(db):
        application = load_for_transition(db, application_id)
        plan = plan_transition(
            application.status, WorkflowAction.CANCEL, current_user.role, is_owner(application, current_user)
        )
        apply_plan(db, application, plan, TransitionContext(actor=current_user))

    db.refresh(application)
    logger.info(f"Application {application.application_number} cancelled by user {current_user.id}")
    audit_transition(application, plan, current_user)
    return application


def _get_staff_officer(db: Session, officer_id: Any) -> User:
    officer = crud_user.get(db, officer_id)
    if not officer:
        raise NotFoundError("Officer not found")
    if not officer.is_staff:
        raise ValidationError("Assigned user must be an officer or admin")
    return officer


def set_application_status(
    db: Session, application_id: Any, obj_in: ApplicationStatusUpdate, current_user: User
) -> Application:
    """Explicit staff status change along a declared edge"""
    with application_lock(application_id), transaction_scope(db):
        application = load_for_transition(db, application_id)
        plan = plan_transition(
            application.status, WorkflowAction.SET_STATUS, current_user.role,
            is_owner(application, current_user), target_status=obj_in.status,
        )
        officer = _get_staff_officer(db, obj_in.assigned_officer) if obj_in.assigned_officer else None

        apply_plan(db, application, plan, TransitionContext(actor=current_user))
        if obj_in.notes:
            append_processing_note(application, obj_in.notes, current_user)
            if plan.next_status == ApplicationStatus.REJECTED:
                application.rejection_reason = obj_in.notes
        if officer:
            assign_officer(application, officer)
        db.flush()

    db.refresh(application)
    logger.info(
        f"Application {application.application_number} status changed "
        f"{plan.current_status.value} -> {plan.next_status.value} by admin {current_user.id}"
    )
    audit_transition(application, plan, current_user)
    return application


def add_processing_note(db: Session, application_id: Any, note: str, current_user: User) -> Dict[str, str]:
    with application_lock(application_id), transaction_scope(db):
        application = load_for_transition(db, application_id)
        plan_transition(
            application.status, WorkflowAction.ADD_NOTE, current_user.role, is_owner(application, current_user)
        )
        entry = append_processing_note(application, note, current_user)
        db.flush()

    audit_service.log_admin_action(current_user.id, "add_note", application_id, {"note": note})
    return entry


def assign_application(db: Session, application_id: Any, officer_id: Any, current_user: User) -> Application:
    with application_lock(application_id), transaction_scope(db):
        application = load_for_transition(db, application_id)
        plan = plan_transition(
            application.status, WorkflowAction.ASSIGN_OFFICER, current_user.role, is_owner(application, current_user)
        )
        officer = _get_staff_officer(db, officer_id)
        apply_plan(db, application, plan, TransitionContext(actor=current_user, officer=officer))

    db.refresh(application)
    audit_service.log_admin_action(current_user.id, "assign_officer", application_id, {"officer_id": str(officer_id)})
    return application


def send_cost_estimation(
    db: Session, application_id: Any, obj_in: CostEstimationRequest, current_user: User
) -> Application:
    """
    Record the fee breakdown and move the application to COST_PROVIDED.
    The total is stored exactly as supplied.
    """
    defaults = settings.DEFAULT_COST_ESTIMATION
    fees = {
        "processing_fee": obj_in.processing_fee if obj_in.processing_fee is not None else defaults["processing_fee"],
        "biometrics_fee": obj_in.biometrics_fee if obj_in.biometrics_fee is not None else defaults["biometrics_fee"],
        "service_fee": obj_in.service_fee if obj_in.service_fee is not None else defaults["service_fee"],
        "courier_fee": obj_in.courier_fee if obj_in.courier_fee is not None else defaults["courier_fee"],
        "total_cost": obj_in.total if obj_in.total is not None else defaults["total"],
    }
    deadline = obj_in.payment_deadline or (utcnow() + timedelta(days=settings.PAYMENT_DEADLINE_DAYS)).date()

    with application_lock(application_id), transaction_scope(db):
        application = load_for_transition(db, application_id)
        plan = plan_transition(
            application.status, WorkflowAction.SEND_COST_ESTIMATION, current_user.role,
            is_owner(application, current_user),
        )
        apply_plan(
            db, application, plan,
            TransitionContext(actor=current_user, fees=fees, payment_deadline=deadline),
        )

    db.refresh(application)
    audit_transition(application, plan, current_user)
    audit_service.log_admin_action(
        current_user.id, "send_cost_estimation", application_id,
        {**{k: str(v) for k, v in fees.items()}, "payment_deadline": deadline.isoformat()},
    )
    return application
