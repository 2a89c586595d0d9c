#!/usr/bin/env python3
"""
Application Workflow API Tests
End-to-end runs of the application lifecycle through the HTTP API
"""

from decimal import Decimal

from sqlalchemy.exc import IntegrityError

from app.crud import application as crud_application
from app.main import is_unique_violation
from conftest import API


def _set_status(client, admin, application_id, status, **extra):
    return client.put(
        f"{API}/admin/applications/{application_id}/status",
        json={"status": status, **extra},
        headers=admin["headers"],
    )


def _get_application(client, account, application_id):
    response = client.get(f"{API}/applications/{application_id}", headers=account["headers"])
    assert response.status_code == 200, response.text
    return response.json()["data"]["application"]


def _owner_notifications(client, account):
    response = client.get(f"{API}/notifications/", params={"limit": 100}, headers=account["headers"])
    assert response.status_code == 200, response.text
    return response.json()["data"]["notifications"]


def test_auth_register_login_and_me(client):
    response = client.post(f"{API}/auth/register", json={
        "email": "New.User@Example.com",
        "password": "Secret123",
        "firstName": "New",
        "lastName": "User",
    })
    assert response.status_code == 201, response.text
    body = response.json()
    assert body["success"] is True
    assert body["data"]["user"]["email"] == "new.user@example.com"
    assert body["data"]["user"]["role"] == "user"

    duplicate = client.post(f"{API}/auth/register", json={
        "email": "new.user@example.com", "password": "Secret123", "firstName": "New", "lastName": "User",
    })
    assert duplicate.status_code == 400
    assert duplicate.json()["success"] is False

    login = client.post(f"{API}/auth/login", json={"email": "new.user@example.com", "password": "Secret123"})
    assert login.status_code == 200
    token = login.json()["data"]["token"]
    assert "token" in login.cookies

    me = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["data"]["user"]["firstName"] == "New"


def test_login_with_wrong_password(client, applicant):
    response = client.post(f"{API}/auth/login", json={"email": applicant["email"], "password": "wrong"})
    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "Invalid credentials"}


def test_weak_password_fails_validation(client):
    response = client.post(f"{API}/auth/register", json={
        "email": "weak@example.com", "password": "password", "firstName": "Weak", "lastName": "Pass",
    })
    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Validation failed"
    assert body["errors"]


def test_requests_without_token_are_rejected(client):
    response = client.get(f"{API}/applications/")
    assert response.status_code == 401
    assert response.json()["success"] is False


def test_unknown_request_fields_are_rejected(client, applicant):
    response = client.post(
        f"{API}/applications/",
        json={"visaType": "tourist", "status": "approved"},
        headers=applicant["headers"],
    )
    assert response.status_code == 400


def test_create_application_starts_in_draft(client, applicant, make_application):
    application = make_application(applicant, fullName="Amina Bintou Diallo", firstName=None, lastName=None)
    assert application["status"] == "draft"
    assert application["applicationNumber"].startswith("VISA-")
    assert application["firstName"] == "Amina"
    assert application["lastName"] == "Bintou Diallo"


def test_application_numbers_are_unique(client, applicant, make_application):
    numbers = {make_application(applicant)["applicationNumber"] for _ in range(20)}
    assert len(numbers) == 20


def test_scenario_full_lifecycle_to_completed(client, applicant, admin, make_application):
    application = make_application(applicant)
    application_id = application["id"]

    submitted = client.put(f"{API}/applications/{application_id}/submit", headers=applicant["headers"])
    assert submitted.status_code == 200
    assert submitted.json()["data"]["application"]["submittedAt"] is not None

    admin_notifications = _owner_notifications(client, admin)
    assert [n["title"] for n in admin_notifications] == ["New Application Submitted for Review"]

    for status in ("under_review", "approved", "completed"):
        response = _set_status(client, admin, application_id, status)
        assert response.status_code == 200, response.text

    final = _get_application(client, applicant, application_id)
    assert final["status"] == "completed"
    assert final["reviewedAt"] and final["approvedAt"] and final["completedAt"]

    notifications = _owner_notifications(client, applicant)
    assert len(notifications) == 4
    types = [n["type"] for n in notifications]
    assert types.count("application_status_update") == 3
    assert types.count("farewell") == 1


def test_scenario_non_owner_cannot_submit(client, applicant, other_applicant, make_application):
    application = make_application(applicant)

    response = client.put(f"{API}/applications/{application['id']}/submit", headers=other_applicant["headers"])
    assert response.status_code == 403
    assert response.json()["success"] is False

    assert _get_application(client, applicant, application["id"])["status"] == "draft"


def test_non_owner_cannot_read_application(client, applicant, other_applicant, make_application):
    application = make_application(applicant)
    response = client.get(f"{API}/applications/{application['id']}", headers=other_applicant["headers"])
    assert response.status_code == 403


def test_owner_can_update_only_while_draft(client, applicant, make_application):
    application = make_application(applicant)
    updated = client.put(
        f"{API}/applications/{application['id']}",
        json={"purposeOfVisit": "Family visit"},
        headers=applicant["headers"],
    )
    assert updated.status_code == 200
    assert updated.json()["data"]["application"]["purposeOfVisit"] == "Family visit"

    client.put(f"{API}/applications/{application['id']}/submit", headers=applicant["headers"])
    blocked = client.put(
        f"{API}/applications/{application['id']}",
        json={"purposeOfVisit": "Business"},
        headers=applicant["headers"],
    )
    assert blocked.status_code == 400


def test_visa_type_cannot_be_cleared(client, applicant, make_application):
    application = make_application(applicant)
    response = client.put(
        f"{API}/applications/{application['id']}", json={"visaType": None}, headers=applicant["headers"]
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Validation failed"
    assert _get_application(client, applicant, application["id"])["visaType"] == "tourist"


def test_unique_violation_detection():
    duplicate = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: users.email"))
    missing = IntegrityError("INSERT", {}, Exception("NOT NULL constraint failed: applications.visa_type"))
    assert is_unique_violation(duplicate)
    assert not is_unique_violation(missing)


def test_non_unique_integrity_error_is_not_reported_as_duplicate(client, applicant, monkeypatch):
    def fail(*args, **kwargs):
        raise IntegrityError("INSERT", {}, Exception("NOT NULL constraint failed: applications.visa_type"))

    monkeypatch.setattr(crud_application, "create_for_user", fail)
    response = client.post(f"{API}/applications/", json={"visaType": "tourist"}, headers=applicant["headers"])
    assert response.status_code == 400
    assert response.json()["message"] != "Duplicate entry"
    assert response.json()["message"].startswith("Invalid data")


def test_submit_twice_is_rejected(client, applicant, submitted_application):
    response = client.put(f"{API}/applications/{submitted_application['id']}/submit", headers=applicant["headers"])
    assert response.status_code == 400
    assert response.json()["message"] == "Only draft applications can be submitted"


def test_undeclared_edge_leaves_status_unchanged(client, applicant, admin, submitted_application):
    application_id = submitted_application["id"]
    _set_status(client, admin, application_id, "under_review")
    _set_status(client, admin, application_id, "approved")

    response = _set_status(client, admin, application_id, "draft")
    assert response.status_code == 400
    assert _get_application(client, applicant, application_id)["status"] == "approved"


def test_set_same_status_is_rejected(client, admin, submitted_application):
    response = _set_status(client, admin, submitted_application["id"], "submitted")
    assert response.status_code == 400


def test_rejection_records_reason_and_note(client, applicant, admin, submitted_application):
    response = _set_status(client, admin, submitted_application["id"], "rejected", notes="Incomplete passport copy")
    assert response.status_code == 200
    application = response.json()["data"]["application"]
    assert application["status"] == "rejected"
    assert application["rejectionReason"] == "Incomplete passport copy"
    assert application["processingNotes"][0]["content"] == "Incomplete passport copy"
    assert application["rejectedAt"] is not None


def test_officer_cannot_use_admin_routes(client, officer, submitted_application):
    response = _set_status(client, officer, submitted_application["id"], "under_review")
    assert response.status_code == 403


def test_cancel_application(client, applicant, make_application):
    application = make_application(applicant)
    response = client.put(f"{API}/applications/{application['id']}/cancel", headers=applicant["headers"])
    assert response.status_code == 200
    assert response.json()["data"]["application"]["status"] == "cancelled"

    again = client.put(f"{API}/applications/{application['id']}/cancel", headers=applicant["headers"])
    assert again.status_code == 400


def test_scenario_cost_estimation_only_once(client, applicant, admin, submitted_application):
    application_id = submitted_application["id"]
    first = client.post(
        f"{API}/admin/application/{application_id}/send-cost-estimation",
        json={"processingFee": 100, "biometricsFee": 40, "serviceFee": 20, "courierFee": 10, "total": 999},
        headers=admin["headers"],
    )
    assert first.status_code == 200, first.text
    application = first.json()["data"]["application"]
    assert application["status"] == "cost_provided"
    # The total is stored as supplied
    assert Decimal(str(application["totalCost"])) == Decimal("999")
    assert application["paymentDeadline"] is not None

    second = client.post(
        f"{API}/admin/application/{application_id}/send-cost-estimation",
        json={"processingFee": 1, "total": 1},
        headers=admin["headers"],
    )
    assert second.status_code == 400

    after = _get_application(client, applicant, application_id)
    assert Decimal(str(after["processingFee"])) == Decimal("100")
    assert Decimal(str(after["totalCost"])) == Decimal("999")

    cost_notifications = [n for n in _owner_notifications(client, applicant) if n["type"] == "cost_estimation"]
    assert len(cost_notifications) == 1


def test_cost_estimation_defaults(client, admin, submitted_application):
    response = client.post(
        f"{API}/admin/application/{submitted_application['id']}/send-cost-estimation",
        json={},
        headers=admin["headers"],
    )
    assert response.status_code == 200
    application = response.json()["data"]["application"]
    assert Decimal(str(application["totalCost"])) == Decimal("225")


def test_assign_officer_and_add_note(client, admin, officer, submitted_application):
    application_id = submitted_application["id"]
    assigned = client.put(
        f"{API}/admin/application/{application_id}/assign",
        json={"officerId": officer["id"]},
        headers=admin["headers"],
    )
    assert assigned.status_code == 200, assigned.text
    assert assigned.json()["data"]["application"]["assignedOfficerId"] == officer["id"]

    officer_notifications = _owner_notifications(client, officer)
    assert [n["type"] for n in officer_notifications] == ["assignment"]

    note = client.post(
        f"{API}/admin/application/{application_id}/notes",
        json={"note": "Passport verified"},
        headers=admin["headers"],
    )
    assert note.status_code == 200
    assert note.json()["data"]["note"]["content"] == "Passport verified"

    detail = client.get(f"{API}/admin/application/{application_id}", headers=admin["headers"])
    assert detail.status_code == 200
    assert detail.json()["data"]["application"]["processingNotes"][0]["content"] == "Passport verified"


def test_assigning_an_applicant_is_rejected(client, admin, other_applicant, submitted_application):
    response = client.put(
        f"{API}/admin/application/{submitted_application['id']}/assign",
        json={"officerId": other_applicant["id"]},
        headers=admin["headers"],
    )
    assert response.status_code == 400


def test_staff_listing_and_pagination(client, applicant, officer, make_application):
    for _ in range(3):
        make_application(applicant)
    response = client.get(f"{API}/applications/admin/all", params={"limit": 2}, headers=officer["headers"])
    assert response.status_code == 200
    data = response.json()["data"]
    assert len(data["applications"]) == 2
    assert data["pagination"] == {"total": 3, "page": 1, "pages": 2, "limit": 2}

    forbidden = client.get(f"{API}/applications/admin/all", headers=applicant["headers"])
    assert forbidden.status_code == 403


def test_status_metadata(client, applicant):
    response = client.get(f"{API}/applications/meta/statuses", headers=applicant["headers"])
    assert response.status_code == 200
    statuses = {s["value"]: s for s in response.json()["data"]["statuses"]}
    assert statuses["completed"]["terminal"] is True
    assert "under_review" in statuses["submitted"]["nextStatuses"]


def test_cost_estimation_endpoint(client, applicant):
    response = client.get(
        f"{API}/applications/cost-estimation",
        params={"visaType": "tourist", "duration": 30, "express": "true"},
        headers=applicant["headers"],
    )
    assert response.status_code == 200
    estimate = response.json()["data"]["estimate"]
    # (150 + 150) + 30 government fee
    assert Decimal(str(estimate["total"])) == Decimal("330")

    invalid = client.get(
        f"{API}/applications/cost-estimation", params={"visaType": "space"}, headers=applicant["headers"]
    )
    assert invalid.status_code == 400
    assert "tourist" in invalid.json()["errors"][0]["validTypes"]


def test_admin_dashboard_and_users(client, admin, applicant, submitted_application):
    dashboard = client.get(f"{API}/admin/dashboard", headers=admin["headers"])
    assert dashboard.status_code == 200
    stats = dashboard.json()["data"]["stats"]
    assert stats["totalApplications"] == 1
    assert stats["pendingApplications"] == 1

    users = client.get(f"{API}/admin/users", params={"role": "user"}, headers=admin["headers"])
    assert users.status_code == 200
    assert [u["email"] for u in users.json()["data"]["users"]] == [applicant["email"]]

    deactivated = client.put(
        f"{API}/admin/users/{applicant['id']}", json={"isActive": False}, headers=admin["headers"]
    )
    assert deactivated.status_code == 200
    assert client.get(f"{API}/applications/", headers=applicant["headers"]).status_code == 401


def test_admin_delete_all_users_keeps_caller(client, admin, applicant, other_applicant, submitted_application):
    response = client.delete(f"{API}/admin/users", headers=admin["headers"])
    assert response.status_code == 200
    assert response.json()["data"]["deletedCount"] == 2

    users = client.get(f"{API}/admin/users", headers=admin["headers"]).json()["data"]["users"]
    assert [u["email"] for u in users] == [admin["email"]]
    assert client.get(f"{API}/admin/dashboard", headers=admin["headers"]).json()["data"]["stats"]["totalApplications"] == 0
