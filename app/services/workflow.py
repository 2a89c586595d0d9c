"""
Application Status Workflow
Single source of truth for application states, legal transitions and who may trigger them

plan_transition() is pure: it looks only at the current status, the requested
action and the caller, and returns the next status together with the side
effects the executor must apply. Authorization is always checked before the
status precondition, so an unauthorized caller never learns anything about the
application's state.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple

from app.core.exceptions import AuthorizationError, ConflictError, ValidationError
from app.models.enums import ApplicationStatus, UserRole, STAFF_ROLES, TERMINAL_STATUSES

S = ApplicationStatus


class WorkflowAction(str, Enum):
    """Every operation that reads or writes application workflow state"""
    SUBMIT = "submit"
    UPDATE_FIELDS = "update_fields"
    CANCEL = "cancel"
    SET_STATUS = "set_status"
    ADD_NOTE = "add_note"
    ASSIGN_OFFICER = "assign_officer"
    SEND_COST_ESTIMATION = "send_cost_estimation"
    SCHEDULE_BIOMETRICS = "schedule_biometrics"
    COMPLETE_BIOMETRICS = "complete_biometrics"
    CANCEL_BIOMETRICS = "cancel_biometrics"
    RESCHEDULE_BIOMETRICS = "reschedule_biometrics"
    UPDATE_BIOMETRICS = "update_biometrics"
    CREATE_PAYMENT = "create_payment"
    COMPLETE_PAYMENT = "complete_payment"
    UPDATE_PAYMENT = "update_payment"
    REFUND_PAYMENT = "refund_payment"
    REVIEW_DOCUMENT = "review_document"


class SideEffect(str, Enum):
    """Writes the executor performs after the status change"""
    STAMP_SUBMITTED = "stamp_submitted"
    STAMP_STATUS_TIMESTAMP = "stamp_status_timestamp"
    STAMP_BIOMETRICS_DATE = "stamp_biometrics_date"
    RECORD_FEES = "record_fees"
    ASSIGN_OFFICER = "assign_officer"
    APPEND_NOTE = "append_note"
    NOTIFY_ADMINS_SUBMITTED = "notify_admins_submitted"
    NOTIFY_OWNER_STATUS = "notify_owner_status"
    NOTIFY_OWNER_FAREWELL = "notify_owner_farewell"
    NOTIFY_OWNER_COST = "notify_owner_cost"
    NOTIFY_OWNER_BIOMETRICS_SCHEDULED = "notify_owner_biometrics_scheduled"
    NOTIFY_OWNER_BIOMETRICS_RESCHEDULED = "notify_owner_biometrics_rescheduled"
    NOTIFY_OWNER_PAYMENT_COMPLETED = "notify_owner_payment_completed"
    NOTIFY_OFFICER_ASSIGNMENT = "notify_officer_assignment"


@dataclass(frozen=True)
class TransitionRule:
    """Who may trigger an action"""
    roles: FrozenSet[UserRole] = frozenset()
    owner: bool = False


@dataclass(frozen=True)
class TransitionPlan:
    """
    Result of planning a transition.
    next_status is None when the action leaves the status untouched;
    cascade_skipped marks a cascade suppressed because the application is terminal.
    """
    action: WorkflowAction
    current_status: ApplicationStatus
    next_status: Optional[ApplicationStatus]
    effects: Tuple[SideEffect, ...] = field(default_factory=tuple)
    cascade_skipped: bool = False

    @property
    def changes_status(self) -> bool:
        return self.next_status is not None and self.next_status != self.current_status


ADMIN_ONLY = frozenset({UserRole.ADMIN})

TRANSITION_RULES: Dict[WorkflowAction, TransitionRule] = {
    WorkflowAction.SUBMIT: TransitionRule(owner=True),
    WorkflowAction.UPDATE_FIELDS: TransitionRule(roles=STAFF_ROLES, owner=True),
    WorkflowAction.CANCEL: TransitionRule(roles=ADMIN_ONLY, owner=True),
    WorkflowAction.SET_STATUS: TransitionRule(roles=ADMIN_ONLY),
    WorkflowAction.ADD_NOTE: TransitionRule(roles=ADMIN_ONLY),
    WorkflowAction.ASSIGN_OFFICER: TransitionRule(roles=ADMIN_ONLY),
    WorkflowAction.SEND_COST_ESTIMATION: TransitionRule(roles=ADMIN_ONLY),
    WorkflowAction.SCHEDULE_BIOMETRICS: TransitionRule(roles=STAFF_ROLES),
    WorkflowAction.COMPLETE_BIOMETRICS: TransitionRule(roles=STAFF_ROLES),
    WorkflowAction.CANCEL_BIOMETRICS: TransitionRule(roles=STAFF_ROLES),
    WorkflowAction.RESCHEDULE_BIOMETRICS: TransitionRule(roles=STAFF_ROLES),
    WorkflowAction.UPDATE_BIOMETRICS: TransitionRule(roles=STAFF_ROLES),
    WorkflowAction.CREATE_PAYMENT: TransitionRule(owner=True),
    WorkflowAction.COMPLETE_PAYMENT: TransitionRule(roles=STAFF_ROLES),
    WorkflowAction.UPDATE_PAYMENT: TransitionRule(roles=STAFF_ROLES),
    WorkflowAction.REFUND_PAYMENT: TransitionRule(roles=ADMIN_ONLY),
    WorkflowAction.REVIEW_DOCUMENT: TransitionRule(roles=STAFF_ROLES),
}

# Edges an administrator may take with an explicit status change
STAFF_STATUS_EDGES: Dict[ApplicationStatus, FrozenSet[ApplicationStatus]] = {
    S.DRAFT: frozenset(),
    S.SUBMITTED: frozenset({S.UNDER_REVIEW, S.DOCUMENTS_REQUIRED, S.REJECTED}),
    S.UNDER_REVIEW: frozenset({S.DOCUMENTS_REQUIRED, S.PAYMENT_PENDING, S.APPROVED, S.REJECTED}),
    S.DOCUMENTS_REQUIRED: frozenset({S.UNDER_REVIEW, S.REJECTED}),
    S.DOCUMENTS_REQUESTED: frozenset({S.UNDER_REVIEW, S.BIOMETRICS_SCHEDULED, S.REJECTED}),
    S.COST_PROVIDED: frozenset({S.PAYMENT_PENDING, S.PAYMENT_COMPLETED, S.UNDER_REVIEW, S.REJECTED}),
    S.PAYMENT_PENDING: frozenset({S.PAYMENT_COMPLETED, S.REJECTED}),
    S.PAYMENT_COMPLETED: frozenset({
        S.UNDER_REVIEW, S.BIOMETRICS_SCHEDULED, S.EMBASSY_SUBMITTED, S.APPROVED, S.REJECTED
    }),
    S.BIOMETRICS_SCHEDULED: frozenset({S.BIOMETRICS_COMPLETED, S.DOCUMENTS_REQUESTED, S.REJECTED}),
    S.BIOMETRICS_COMPLETED: frozenset({
        S.UNDER_REVIEW, S.EMBASSY_SUBMITTED, S.PROCESSING, S.APPROVED, S.REJECTED
    }),
    S.EMBASSY_SUBMITTED: frozenset({S.PROCESSING, S.APPROVED, S.REJECTED}),
    S.PROCESSING: frozenset({S.APPROVED, S.REJECTED}),
    S.APPROVED: frozenset({S.COMPLETED, S.ISSUED}),
    S.REJECTED: frozenset(),
    S.COMPLETED: frozenset(),
    S.ISSUED: frozenset(),
    S.CANCELLED: frozenset(),
}

# Timestamp column stamped when an explicit status change lands on the status
STATUS_TIMESTAMP_COLUMNS: Dict[ApplicationStatus, str] = {
    S.UNDER_REVIEW: "reviewed_at",
    S.APPROVED: "approved_at",
    S.REJECTED: "rejected_at",
    S.BIOMETRICS_SCHEDULED: "biometrics_date",
    S.COMPLETED: "completed_at",
    S.ISSUED: "issued_at",
}

FAREWELL_STATUSES = frozenset({S.COMPLETED, S.ISSUED})

# Cascades: related-entity actions that move the application, keyed by the
# statuses they may start from (None = any non-terminal status)
CASCADES: Dict[WorkflowAction, Tuple[Optional[FrozenSet[ApplicationStatus]], ApplicationStatus]] = {
    WorkflowAction.COMPLETE_BIOMETRICS: (None, S.BIOMETRICS_COMPLETED),
    WorkflowAction.CANCEL_BIOMETRICS: (None, S.DOCUMENTS_REQUESTED),
    WorkflowAction.CREATE_PAYMENT: (frozenset({S.COST_PROVIDED}), S.PAYMENT_PENDING),
    WorkflowAction.COMPLETE_PAYMENT: (frozenset({S.PAYMENT_PENDING}), S.PAYMENT_COMPLETED),
}


def is_terminal(status: ApplicationStatus) -> bool:
    return status in TERMINAL_STATUSES


def allowed_targets(status: ApplicationStatus) -> FrozenSet[ApplicationStatus]:
    return STAFF_STATUS_EDGES.get(status, frozenset())


def can_transition(current: ApplicationStatus, target: ApplicationStatus) -> bool:
    return target in allowed_targets(current)


def authorize(action: WorkflowAction, caller_role: UserRole, caller_is_owner: bool) -> None:
    """Raise AuthorizationError unless the caller's role or ownership permits the action"""
    rule = TRANSITION_RULES[action]
    if caller_role in rule.roles:
        return
    if rule.owner and caller_is_owner:
        return
    raise AuthorizationError(f"Not authorized to {action.value.replace('_', ' ')} this application")


def plan_transition(
    current_status: ApplicationStatus,
    action: WorkflowAction,
    caller_role: UserRole,
    caller_is_owner: bool,
    target_status: Optional[ApplicationStatus] = None,
) -> TransitionPlan:
    """
    Validate an action against the current status and return what must happen.

    Raises:
        AuthorizationError: caller may not trigger the action
        ConflictError: the status precondition does not hold
        ValidationError: SET_STATUS without a target
    """
    current_status = ApplicationStatus(current_status)
    caller_role = UserRole(caller_role)
    authorize(action, caller_role, caller_is_owner)

    planner = _PLANNERS.get(action, _plan_no_status_change)
    return planner(current_status, action, caller_role, target_status)


def _plan_no_status_change(current, action, caller_role, target):
    effects = {
        WorkflowAction.RESCHEDULE_BIOMETRICS: (SideEffect.NOTIFY_OWNER_BIOMETRICS_RESCHEDULED,),
    }.get(action, ())
    return TransitionPlan(action, current, None, effects)


def _plan_submit(current, action, caller_role, target):
    if current != S.DRAFT:
        raise ConflictError("Only draft applications can be submitted")
    return TransitionPlan(
        action, current, S.SUBMITTED,
        (SideEffect.STAMP_SUBMITTED, SideEffect.NOTIFY_ADMINS_SUBMITTED),
    )


def _plan_update_fields(current, action, caller_role, target):
    if current != S.DRAFT and caller_role not in STAFF_ROLES:
        raise ConflictError("Cannot update application after submission")
    return TransitionPlan(action, current, None)


def _plan_cancel(current, action, caller_role, target):
    if is_terminal(current) or current == S.APPROVED:
        raise ConflictError(f"Cannot cancel application in status '{current.value}'")
    return TransitionPlan(action, current, S.CANCELLED)


def _plan_set_status(current, action, caller_role, target):
    if target is None:
        raise ValidationError("Target status is required")
    target = ApplicationStatus(target)
    if target == current:
        raise ConflictError(f"Application is already in status '{current.value}'")
    if not can_transition(current, target):
        raise ConflictError(f"Invalid status transition from '{current.value}' to '{target.value}'")

    effects = [SideEffect.NOTIFY_OWNER_STATUS]
    if target in STATUS_TIMESTAMP_COLUMNS:
        effects.insert(0, SideEffect.STAMP_STATUS_TIMESTAMP)
    if target in FAREWELL_STATUSES:
        effects.append(SideEffect.NOTIFY_OWNER_FAREWELL)
    return TransitionPlan(action, current, target, tuple(effects))


def _plan_add_note(current, action, caller_role, target):
    return TransitionPlan(action, current, None, (SideEffect.APPEND_NOTE,))


def _plan_assign_officer(current, action, caller_role, target):
    return TransitionPlan(
        action, current, None,
        (SideEffect.ASSIGN_OFFICER, SideEffect.NOTIFY_OFFICER_ASSIGNMENT),
    )


def _plan_cost_estimation(current, action, caller_role, target):
    if current == S.COST_PROVIDED:
        raise ConflictError("Cost estimation has already been sent for this application")
    if is_terminal(current):
        raise ConflictError(f"Cannot send cost estimation for an application in status '{current.value}'")
    return TransitionPlan(
        action, current, S.COST_PROVIDED,
        (SideEffect.RECORD_FEES, SideEffect.NOTIFY_OWNER_COST),
    )


def _plan_schedule_biometrics(current, action, caller_role, target):
    if is_terminal(current):
        raise ConflictError(f"Cannot schedule biometrics for an application in status '{current.value}'")
    return TransitionPlan(
        action, current, S.BIOMETRICS_SCHEDULED,
        (SideEffect.STAMP_BIOMETRICS_DATE, SideEffect.NOTIFY_OWNER_BIOMETRICS_SCHEDULED),
    )


def _plan_cascade(current, action, caller_role, target):
    """Related-entity update that may move the application; never blocks the update itself"""
    sources, cascade_target = CASCADES[action]
    effects = (SideEffect.NOTIFY_OWNER_PAYMENT_COMPLETED,) if action == WorkflowAction.COMPLETE_PAYMENT else ()

    if is_terminal(current):
        return TransitionPlan(action, current, None, effects, cascade_skipped=True)
    if sources is not None and current not in sources:
        return TransitionPlan(action, current, None, effects)
    if current == cascade_target:
        return TransitionPlan(action, current, None, effects)
    return TransitionPlan(action, current, cascade_target, effects)


_PLANNERS = {
    WorkflowAction.SUBMIT: _plan_submit,
    WorkflowAction.UPDATE_FIELDS: _plan_update_fields,
    WorkflowAction.CANCEL: _plan_cancel,
    WorkflowAction.SET_STATUS: _plan_set_status,
    WorkflowAction.ADD_NOTE: _plan_add_note,
    WorkflowAction.ASSIGN_OFFICER: _plan_assign_officer,
    WorkflowAction.SEND_COST_ESTIMATION: _plan_cost_estimation,
    WorkflowAction.SCHEDULE_BIOMETRICS: _plan_schedule_biometrics,
    WorkflowAction.COMPLETE_BIOMETRICS: _plan_cascade,
    WorkflowAction.CANCEL_BIOMETRICS: _plan_cascade,
    WorkflowAction.CREATE_PAYMENT: _plan_cascade,
    WorkflowAction.COMPLETE_PAYMENT: _plan_cascade,
}
