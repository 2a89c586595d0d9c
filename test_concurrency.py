#!/usr/bin/env python3
"""
Concurrency Tests
Application number uniqueness and per-application serialization under parallel requests.
The HTTP scenarios run against a file-backed SQLite database so every request
thread gets its own connection.
"""

import threading
import time
import uuid
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.database import get_db
from app.crud import ApplicationNumberGenerator
from app.main import app
from app.models import user, application, document, payment, biometric, notification  # noqa: F401
from app.models.base import Base
from app.models.enums import UserRole
from app.services.locks import active_lock_count, application_lock
from conftest import API, _make_account

WORKERS = 8

APPLICATION = {
    "visaType": "tourist",
    "firstName": "Amina",
    "lastName": "Diallo",
    "destinationCountry": "United Arab Emirates",
    "passportNumber": "P1234567",
    "nationality": "Senegalese",
    "durationOfStay": 30,
}


@pytest.fixture
def file_sessions(tmp_path):
    """Route the API to a file-backed database for the duration of a test"""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'visa.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def _get_db():
        db = factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    try:
        yield factory
    finally:
        app.dependency_overrides.pop(get_db, None)
        engine.dispose()


def test_number_generator_is_unique_across_threads():
    generator = ApplicationNumberGenerator()
    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        numbers = list(pool.map(lambda _: generator.next(), range(500)))
    assert len(set(numbers)) == 500
    assert all(n.startswith("VISA-") for n in numbers)


def test_parallel_creates_get_distinct_numbers(client, file_sessions):
    account = _make_account("parallel@example.com", session_factory=file_sessions)

    def create(_):
        return client.post(f"{API}/applications/", json=APPLICATION, headers=account["headers"])

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        responses = list(pool.map(create, range(16)))

    assert [r.status_code for r in responses] == [201] * 16
    numbers = {r.json()["data"]["application"]["applicationNumber"] for r in responses}
    assert len(numbers) == 16


def test_parallel_cost_estimations_apply_once(client, file_sessions):
    owner = _make_account("owner@example.com", session_factory=file_sessions)
    admin = _make_account("boss@example.com", role=UserRole.ADMIN, session_factory=file_sessions)

    created = client.post(f"{API}/applications/", json=APPLICATION, headers=owner["headers"])
    application_id = created.json()["data"]["application"]["id"]
    submitted = client.put(f"{API}/applications/{application_id}/submit", headers=owner["headers"])
    assert submitted.status_code == 200, submitted.text

    def send(_):
        return client.post(
            f"{API}/admin/application/{application_id}/send-cost-estimation",
            json={"total": 225},
            headers=admin["headers"],
        )

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        responses = list(pool.map(send, range(WORKERS)))

    codes = sorted(r.status_code for r in responses)
    assert codes == [200] + [400] * (WORKERS - 1)
    final = client.get(f"{API}/applications/{application_id}", headers=owner["headers"])
    assert final.json()["data"]["application"]["status"] == "cost_provided"
    assert active_lock_count() == 0


def test_application_lock_is_mutually_exclusive():
    application_id = uuid.uuid4()
    holders = []
    peak = []
    guard = threading.Lock()

    def work(_):
        with application_lock(application_id):
            with guard:
                holders.append(1)
                peak.append(len(holders))
            time.sleep(0.01)
            with guard:
                holders.pop()

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        list(pool.map(work, range(WORKERS * 2)))

    assert max(peak) == 1
    assert active_lock_count() == 0


def test_lock_registry_does_not_grow_with_unknown_ids(client, applicant):
    for _ in range(5):
        response = client.put(f"{API}/applications/{uuid.uuid4()}/submit", headers=applicant["headers"])
        assert response.status_code == 404
    assert active_lock_count() == 0


def test_lock_is_released_when_the_block_raises():
    application_id = uuid.uuid4()
    with pytest.raises(RuntimeError):
        with application_lock(application_id):
            raise RuntimeError("boom")
    assert active_lock_count() == 0
