#!/usr/bin/env python3
"""
Workflow Transition Table Tests
Pure tests of plan_transition: authorization, preconditions, edges and cascades
"""

import pytest

from app.core.exceptions import AuthorizationError, ConflictError, ValidationError
from app.models.enums import ApplicationStatus, UserRole, TERMINAL_STATUSES
from app.services.workflow import (
    SideEffect, WorkflowAction, STAFF_STATUS_EDGES,
    allowed_targets, can_transition, is_terminal, plan_transition
)

S = ApplicationStatus


def test_every_status_has_an_edge_entry():
    assert set(STAFF_STATUS_EDGES) == set(ApplicationStatus)


def test_terminal_statuses_have_no_outgoing_edges():
    for status in TERMINAL_STATUSES:
        assert is_terminal(status)
        assert allowed_targets(status) == frozenset()


def test_submit_draft_by_owner():
    plan = plan_transition(S.DRAFT, WorkflowAction.SUBMIT, UserRole.USER, True)
    assert plan.next_status == S.SUBMITTED
    assert SideEffect.STAMP_SUBMITTED in plan.effects
    assert SideEffect.NOTIFY_ADMINS_SUBMITTED in plan.effects


def test_submit_by_non_owner_is_forbidden_even_for_admin():
    with pytest.raises(AuthorizationError):
        plan_transition(S.DRAFT, WorkflowAction.SUBMIT, UserRole.USER, False)
    with pytest.raises(AuthorizationError):
        plan_transition(S.DRAFT, WorkflowAction.SUBMIT, UserRole.ADMIN, False)


def test_submit_twice_conflicts():
    with pytest.raises(ConflictError):
        plan_transition(S.SUBMITTED, WorkflowAction.SUBMIT, UserRole.USER, True)


def test_authorization_is_checked_before_status():
    # A stranger gets 403 even when the status would also reject the action
    with pytest.raises(AuthorizationError):
        plan_transition(S.COMPLETED, WorkflowAction.CANCEL, UserRole.USER, False)


def test_owner_cannot_edit_after_submission_but_staff_can():
    with pytest.raises(ConflictError):
        plan_transition(S.SUBMITTED, WorkflowAction.UPDATE_FIELDS, UserRole.USER, True)
    plan = plan_transition(S.SUBMITTED, WorkflowAction.UPDATE_FIELDS, UserRole.OFFICER, False)
    assert plan.next_status is None
    assert not plan.changes_status


@pytest.mark.parametrize("status", [S.APPROVED, S.REJECTED, S.COMPLETED, S.ISSUED, S.CANCELLED])
def test_cancel_blocked_for_approved_and_terminal(status):
    with pytest.raises(ConflictError):
        plan_transition(status, WorkflowAction.CANCEL, UserRole.USER, True)


def test_admin_may_cancel_someone_elses_application():
    plan = plan_transition(S.UNDER_REVIEW, WorkflowAction.CANCEL, UserRole.ADMIN, False)
    assert plan.next_status == S.CANCELLED


def test_set_status_follows_declared_edges():
    plan = plan_transition(S.SUBMITTED, WorkflowAction.SET_STATUS, UserRole.ADMIN, False, S.UNDER_REVIEW)
    assert plan.next_status == S.UNDER_REVIEW
    assert plan.effects[0] == SideEffect.STAMP_STATUS_TIMESTAMP
    assert SideEffect.NOTIFY_OWNER_STATUS in plan.effects


def test_set_status_rejects_undeclared_edge():
    assert not can_transition(S.APPROVED, S.DRAFT)
    with pytest.raises(ConflictError):
        plan_transition(S.APPROVED, WorkflowAction.SET_STATUS, UserRole.ADMIN, False, S.DRAFT)


def test_set_status_to_same_status_conflicts():
    with pytest.raises(ConflictError):
        plan_transition(S.UNDER_REVIEW, WorkflowAction.SET_STATUS, UserRole.ADMIN, False, S.UNDER_REVIEW)


def test_set_status_requires_target():
    with pytest.raises(ValidationError):
        plan_transition(S.SUBMITTED, WorkflowAction.SET_STATUS, UserRole.ADMIN, False)


def test_set_status_is_admin_only():
    with pytest.raises(AuthorizationError):
        plan_transition(S.SUBMITTED, WorkflowAction.SET_STATUS, UserRole.OFFICER, False, S.UNDER_REVIEW)


@pytest.mark.parametrize("target", [S.COMPLETED, S.ISSUED])
def test_completion_adds_farewell(target):
    plan = plan_transition(S.APPROVED, WorkflowAction.SET_STATUS, UserRole.ADMIN, False, target)
    assert plan.effects.count(SideEffect.NOTIFY_OWNER_STATUS) == 1
    assert plan.effects.count(SideEffect.NOTIFY_OWNER_FAREWELL) == 1


def test_cost_estimation_only_once():
    plan = plan_transition(S.UNDER_REVIEW, WorkflowAction.SEND_COST_ESTIMATION, UserRole.ADMIN, False)
    assert plan.next_status == S.COST_PROVIDED
    with pytest.raises(ConflictError):
        plan_transition(S.COST_PROVIDED, WorkflowAction.SEND_COST_ESTIMATION, UserRole.ADMIN, False)
    with pytest.raises(ConflictError):
        plan_transition(S.REJECTED, WorkflowAction.SEND_COST_ESTIMATION, UserRole.ADMIN, False)


def test_scheduling_biometrics_is_staff_only():
    with pytest.raises(AuthorizationError):
        plan_transition(S.PAYMENT_COMPLETED, WorkflowAction.SCHEDULE_BIOMETRICS, UserRole.USER, True)
    plan = plan_transition(S.PAYMENT_COMPLETED, WorkflowAction.SCHEDULE_BIOMETRICS, UserRole.OFFICER, False)
    assert plan.next_status == S.BIOMETRICS_SCHEDULED


def test_biometric_cascades():
    completed = plan_transition(S.BIOMETRICS_SCHEDULED, WorkflowAction.COMPLETE_BIOMETRICS, UserRole.OFFICER, False)
    assert completed.next_status == S.BIOMETRICS_COMPLETED
    cancelled = plan_transition(S.BIOMETRICS_SCHEDULED, WorkflowAction.CANCEL_BIOMETRICS, UserRole.OFFICER, False)
    assert cancelled.next_status == S.DOCUMENTS_REQUESTED


def test_cascade_skipped_for_terminal_application():
    plan = plan_transition(S.CANCELLED, WorkflowAction.COMPLETE_BIOMETRICS, UserRole.ADMIN, False)
    assert plan.next_status is None
    assert plan.cascade_skipped


def test_payment_cascades_only_from_expected_status():
    created = plan_transition(S.COST_PROVIDED, WorkflowAction.CREATE_PAYMENT, UserRole.USER, True)
    assert created.next_status == S.PAYMENT_PENDING

    untouched = plan_transition(S.UNDER_REVIEW, WorkflowAction.CREATE_PAYMENT, UserRole.USER, True)
    assert untouched.next_status is None
    assert not untouched.cascade_skipped

    completed = plan_transition(S.PAYMENT_PENDING, WorkflowAction.COMPLETE_PAYMENT, UserRole.OFFICER, False)
    assert completed.next_status == S.PAYMENT_COMPLETED
    assert SideEffect.NOTIFY_OWNER_PAYMENT_COMPLETED in completed.effects


def test_refund_is_admin_only():
    with pytest.raises(AuthorizationError):
        plan_transition(S.PAYMENT_COMPLETED, WorkflowAction.REFUND_PAYMENT, UserRole.OFFICER, False)
