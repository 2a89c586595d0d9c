"""
Shared pytest fixtures for the Visa Processing System
Runs the API against an in-memory SQLite database and a temporary upload directory
"""

import os
import tempfile

# Settings are read at import time, so the environment must be set before app imports
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="visa-uploads-")
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["ENVIRONMENT"] = "testing"

import pytest
from fastapi.testclient import TestClient

from app.core.database import SessionLocal, create_tables, drop_tables
from app.core.security import create_access_token, create_user_token_claims
from app.crud import user as crud_user
from app.main import app
from app.models.enums import UserRole
from app.schemas.user import UserRegister

API = "/api/v1"


@pytest.fixture(autouse=True)
def database():
    create_tables()
    yield
    drop_tables()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


def _make_account(email, role=UserRole.USER, first_name="Test", last_name="User", session_factory=SessionLocal):
    """Create a user directly and return (id, auth headers)"""
    session = session_factory()
    try:
        user = crud_user.create_user(
            session,
            obj_in=UserRegister(email=email, password="Password123", first_name=first_name, last_name=last_name),
            role=role,
            is_verified=True,
        )
        token = create_access_token(subject=user.id, additional_claims=create_user_token_claims(user))
        return {"id": str(user.id), "email": email, "headers": {"Authorization": f"Bearer {token}"}}
    finally:
        session.close()


@pytest.fixture
def applicant():
    return _make_account("applicant@example.com", first_name="Amina", last_name="Diallo")


@pytest.fixture
def other_applicant():
    return _make_account("other@example.com", first_name="Jonas", last_name="Berg")


@pytest.fixture
def admin():
    return _make_account("admin@example.com", role=UserRole.ADMIN, first_name="System", last_name="Admin")


@pytest.fixture
def officer():
    return _make_account("officer@example.com", role=UserRole.OFFICER, first_name="Visa", last_name="Officer")


@pytest.fixture
def make_application(client):
    """Create a draft application for an account and return its JSON body"""
    def _make(account, **overrides):
        payload = {
            "visaType": "tourist",
            "firstName": "Amina",
            "lastName": "Diallo",
            "destinationCountry": "United Arab Emirates",
            "passportNumber": "P1234567",
            "nationality": "Senegalese",
            "purposeOfVisit": "Tourism",
            "durationOfStay": 30,
        }
        payload.update(overrides)
        response = client.post(f"{API}/applications/", json=payload, headers=account["headers"])
        assert response.status_code == 201, response.text
        return response.json()["data"]["application"]
    return _make


@pytest.fixture
def submitted_application(client, applicant, make_application):
    application = make_application(applicant)
    response = client.put(f"{API}/applications/{application['id']}/submit", headers=applicant["headers"])
    assert response.status_code == 200, response.text
    return response.json()["data"]["application"]
