#!/usr/bin/env python3
"""
Biometrics and Payments API Tests
Related-entity operations and the cascades they drive on the application
"""

import uuid
from decimal import Decimal

import pytest

from app.models.biometric import BiometricAppointment
from app.models.enums import BiometricStatus
from app.models.payment import Payment
from app.models.user import User
from app.schemas.biometric import BiometricStatusUpdate
from app.services import biometric_service
from conftest import API

APPOINTMENT = {"appointmentDate": "2030-05-20T09:30:00", "location": "Dubai Main Center"}


def _status(client, account, application_id):
    response = client.get(f"{API}/applications/{application_id}", headers=account["headers"])
    return response.json()["data"]["application"]["status"]


@pytest.fixture
def cost_provided_application(client, admin, submitted_application):
    response = client.post(
        f"{API}/admin/application/{submitted_application['id']}/send-cost-estimation",
        json={"total": 225},
        headers=admin["headers"],
    )
    assert response.status_code == 200, response.text
    return response.json()["data"]["application"]


def _create_payment(client, account, application_id, **overrides):
    payload = {
        "applicationId": application_id,
        "amount": 225,
        "currency": "USD",
        "paymentMethod": "credit_card",
    }
    payload.update(overrides)
    return client.post(f"{API}/payments/", json=payload, headers=account["headers"])


def _schedule(client, account, application_id):
    return client.post(
        f"{API}/biometrics/", json={"applicationId": application_id, **APPOINTMENT}, headers=account["headers"]
    )


def test_payment_moves_application_through_payment_states(client, applicant, officer, cost_provided_application):
    application_id = cost_provided_application["id"]

    created = _create_payment(client, applicant, application_id)
    assert created.status_code == 201, created.text
    payment = created.json()["data"]["payment"]
    assert payment["status"] == "pending"
    assert _status(client, applicant, application_id) == "payment_pending"

    completed = client.put(
        f"{API}/payments/{payment['id']}/status",
        json={"status": "completed", "transactionId": "TXN-1001"},
        headers=officer["headers"],
    )
    assert completed.status_code == 200, completed.text
    body = completed.json()["data"]["payment"]
    assert body["processedBy"] == officer["id"]
    assert body["processedAt"] is not None
    assert _status(client, applicant, application_id) == "payment_completed"

    notifications = client.get(f"{API}/notifications/", headers=applicant["headers"]).json()["data"]["notifications"]
    assert "payment_completed" in [n["type"] for n in notifications]


def test_second_payment_is_rejected(client, db, applicant, cost_provided_application):
    application_id = cost_provided_application["id"]
    assert _create_payment(client, applicant, application_id).status_code == 201

    duplicate = _create_payment(client, applicant, application_id)
    assert duplicate.status_code == 400
    assert duplicate.json()["message"] == "Payment already exists for this application"
    assert db.query(Payment).count() == 1


def test_only_the_owner_can_pay(client, other_applicant, cost_provided_application):
    response = _create_payment(client, other_applicant, cost_provided_application["id"])
    assert response.status_code == 403


def test_applicant_cannot_complete_own_payment(client, applicant, cost_provided_application):
    payment = _create_payment(client, applicant, cost_provided_application["id"]).json()["data"]["payment"]
    response = client.put(
        f"{API}/payments/{payment['id']}/status", json={"status": "completed"}, headers=applicant["headers"]
    )
    assert response.status_code == 403
    assert _status(client, applicant, cost_provided_application["id"]) == "payment_pending"


def test_refund_requires_completed_payment(client, applicant, admin, cost_provided_application):
    payment = _create_payment(client, applicant, cost_provided_application["id"]).json()["data"]["payment"]

    early = client.post(f"{API}/payments/{payment['id']}/refund", json={"reason": "Duplicate"}, headers=admin["headers"])
    assert early.status_code == 400

    client.put(f"{API}/payments/{payment['id']}/status", json={"status": "completed"}, headers=admin["headers"])
    refunded = client.post(
        f"{API}/payments/{payment['id']}/refund",
        json={"reason": "Application withdrawn", "amount": 100},
        headers=admin["headers"],
    )
    assert refunded.status_code == 200, refunded.text
    data = refunded.json()["data"]
    assert data["payment"]["status"] == "refunded"
    assert Decimal(str(data["refundAmount"])) == Decimal("100")


def test_payment_listing(client, applicant, admin, cost_provided_application):
    _create_payment(client, applicant, cost_provided_application["id"])
    mine = client.get(f"{API}/payments/", headers=applicant["headers"])
    assert len(mine.json()["data"]["payments"]) == 1

    everything = client.get(f"{API}/payments/admin/all", headers=admin["headers"])
    assert everything.json()["data"]["pagination"]["total"] == 1


def test_scenario_schedule_biometrics_twice(client, db, applicant, officer, submitted_application):
    application_id = submitted_application["id"]

    first = _schedule(client, officer, application_id)
    assert first.status_code == 201, first.text
    assert first.json()["data"]["appointment"]["status"] == "scheduled"
    assert _status(client, applicant, application_id) == "biometrics_scheduled"

    second = _schedule(client, officer, application_id)
    assert second.status_code == 400
    assert second.json()["message"] == "Biometric appointment already scheduled for this application"
    assert db.query(BiometricAppointment).count() == 1


def test_applicant_cannot_schedule_biometrics(client, applicant, submitted_application):
    assert _schedule(client, applicant, submitted_application["id"]).status_code == 403


def test_completed_appointment_cascades(client, applicant, officer, submitted_application):
    application_id = submitted_application["id"]
    appointment = _schedule(client, officer, application_id).json()["data"]["appointment"]

    response = client.put(
        f"{API}/biometrics/{appointment['id']}/status", json={"status": "completed"}, headers=officer["headers"]
    )
    assert response.status_code == 200, response.text
    assert response.json()["data"]["appointment"]["completedBy"] == officer["id"]
    assert _status(client, applicant, application_id) == "biometrics_completed"


def test_status_update_reads_the_current_appointment(client, db, applicant, admin, officer, submitted_application):
    appointment_id = uuid.UUID(
        _schedule(client, officer, submitted_application["id"]).json()["data"]["appointment"]["id"]
    )
    # Cache the scheduled row in this session before another request completes it
    stale = biometric_service.get_appointment(db, appointment_id)
    assert stale.status == BiometricStatus.SCHEDULED

    completed = client.put(
        f"{API}/biometrics/{appointment_id}/status", json={"status": "completed"}, headers=admin["headers"]
    )
    assert completed.status_code == 200, completed.text

    officer_user = db.get(User, uuid.UUID(officer["id"]))
    appointment = biometric_service.update_appointment_status(
        db, appointment_id, BiometricStatusUpdate(status="completed"), officer_user
    )
    assert appointment.status == BiometricStatus.COMPLETED
    assert str(appointment.completed_by) == admin["id"]


def test_cancelled_appointment_cascades(client, applicant, officer, submitted_application):
    application_id = submitted_application["id"]
    appointment = _schedule(client, officer, application_id).json()["data"]["appointment"]

    client.put(f"{API}/biometrics/{appointment['id']}/status", json={"status": "cancelled"}, headers=officer["headers"])
    assert _status(client, applicant, application_id) == "documents_requested"


def test_cascade_skipped_for_terminal_application(client, applicant, admin, officer, submitted_application):
    application_id = submitted_application["id"]
    appointment = _schedule(client, officer, application_id).json()["data"]["appointment"]
    client.put(f"{API}/admin/applications/{application_id}/status", json={"status": "rejected"}, headers=admin["headers"])

    response = client.put(
        f"{API}/biometrics/{appointment['id']}/status", json={"status": "completed"}, headers=officer["headers"]
    )
    assert response.status_code == 200
    assert response.json()["data"]["appointment"]["status"] == "completed"
    assert _status(client, applicant, application_id) == "rejected"


def test_reschedule_only_from_scheduled(client, applicant, officer, submitted_application):
    appointment = _schedule(client, officer, submitted_application["id"]).json()["data"]["appointment"]

    moved = client.put(
        f"{API}/biometrics/{appointment['id']}/reschedule",
        json={"appointmentDate": "2030-06-01T10:00:00", "reason": "Center closed"},
        headers=officer["headers"],
    )
    assert moved.status_code == 200, moved.text
    body = moved.json()["data"]["appointment"]
    assert body["status"] == "rescheduled"
    assert body["location"] == "Dubai Main Center"
    assert "Rescheduled: Center closed" in body["notes"]

    again = client.put(
        f"{API}/biometrics/{appointment['id']}/reschedule",
        json={"appointmentDate": "2030-06-02T10:00:00", "reason": "Again"},
        headers=officer["headers"],
    )
    assert again.status_code == 400

    types = [n["type"] for n in client.get(f"{API}/notifications/", headers=applicant["headers"]).json()["data"]["notifications"]]
    assert "biometrics_rescheduled" in types


def test_appointment_visibility(client, applicant, other_applicant, officer, submitted_application):
    appointment = _schedule(client, officer, submitted_application["id"]).json()["data"]["appointment"]

    mine = client.get(f"{API}/biometrics/", headers=applicant["headers"])
    assert [a["id"] for a in mine.json()["data"]["appointments"]] == [appointment["id"]]

    assert client.get(f"{API}/biometrics/{appointment['id']}", headers=applicant["headers"]).status_code == 200
    assert client.get(f"{API}/biometrics/{appointment['id']}", headers=other_applicant["headers"]).status_code == 403


def test_biometric_locations(client, applicant):
    response = client.get(f"{API}/biometrics/locations", headers=applicant["headers"])
    locations = response.json()["data"]["locations"]
    assert len(locations) == 5
    assert locations[0]["id"] == "dubai_main"
