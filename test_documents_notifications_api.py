#!/usr/bin/env python3
"""
Documents and Notifications API Tests
"""

import io
from pathlib import Path

import pytest
from PIL import Image

from app.core.config import get_settings
from app.core.exceptions import ValidationError
from app.models.document import Document
from app.services.file_storage import DocumentFileManager
from conftest import API

PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\ntrailer\n<< /Root 1 0 R >>\n%%EOF\n"


def _png_bytes():
    buffer = io.BytesIO()
    Image.new("RGB", (8, 8), color=(200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


def _upload(client, account, name="passport.png", content=None, mime_type="image/png", **form):
    data = {"documentType": "passport", **form}
    return client.post(
        f"{API}/documents/",
        files={"file": (name, content if content is not None else _png_bytes(), mime_type)},
        data=data,
        headers=account["headers"],
    )


def test_upload_image_document(client, applicant, make_application):
    application = make_application(applicant)
    response = _upload(client, applicant, applicationId=application["id"], description="Bio page")
    assert response.status_code == 201, response.text
    document = response.json()["data"]["document"]
    assert document["status"] == "pending"
    assert document["originalName"] == "passport.png"
    assert document["applicationId"] == application["id"]
    assert document["fileName"].endswith(".png")


def test_upload_pdf_document(client, db, applicant):
    response = _upload(client, applicant, name="statement.pdf", content=PDF_BYTES,
                       mime_type="application/pdf", documentType="bank_statement")
    assert response.status_code == 201, response.text
    stored = db.query(Document).one()
    assert Path(stored.file_path).read_bytes() == PDF_BYTES


def test_disallowed_mime_type_is_rejected(client, db, applicant):
    response = _upload(client, applicant, name="script.sh", content=b"echo hi", mime_type="text/x-shellscript")
    assert response.status_code == 400
    assert db.query(Document).count() == 0


def test_corrupt_image_is_rejected(client, applicant):
    response = _upload(client, applicant, content=b"not really a png")
    assert response.status_code == 400


def test_oversized_file_is_rejected(client, db, applicant, monkeypatch):
    monkeypatch.setattr(get_settings(), "MAX_FILE_SIZE_MB", 1)
    response = _upload(client, applicant, name="big.pdf", content=b"0" * (1024 * 1024 + 1), mime_type="application/pdf")
    assert response.status_code == 400
    assert "File too large" in response.json()["message"]
    assert db.query(Document).count() == 0


class _CountingStream(io.BytesIO):
    def __init__(self, content):
        super().__init__(content)
        self.bytes_read = 0

    def read(self, size=-1):
        chunk = super().read(size)
        self.bytes_read += len(chunk)
        return chunk


def test_upload_read_stops_past_the_limit(monkeypatch):
    monkeypatch.setattr(get_settings(), "MAX_FILE_SIZE_MB", 1)
    limit = 1024 * 1024
    stream = _CountingStream(b"0" * (limit * 3))
    with pytest.raises(ValidationError):
        DocumentFileManager().read_upload(stream)
    assert stream.bytes_read == limit + 1

    assert DocumentFileManager().read_upload(io.BytesIO(PDF_BYTES)) == PDF_BYTES


def test_upload_to_someone_elses_application(client, applicant, other_applicant, make_application):
    application = make_application(applicant)
    response = _upload(client, other_applicant, applicationId=application["id"])
    assert response.status_code == 404


def test_review_document_notifies_owner(client, applicant, officer):
    document = _upload(client, applicant).json()["data"]["document"]

    rejected = client.put(
        f"{API}/documents/{document['id']}/status",
        json={"status": "rejected", "rejectionReason": "Image is blurry"},
        headers=officer["headers"],
    )
    assert rejected.status_code == 200, rejected.text
    assert rejected.json()["data"]["document"]["rejectionReason"] == "Image is blurry"

    approved = client.put(
        f"{API}/documents/{document['id']}/status", json={"status": "approved"}, headers=officer["headers"]
    )
    body = approved.json()["data"]["document"]
    assert body["status"] == "approved"
    assert body["verifiedAt"] is not None
    assert body["reviewedBy"] == officer["id"]

    types = [n["type"] for n in client.get(f"{API}/notifications/", headers=applicant["headers"]).json()["data"]["notifications"]]
    assert sorted(types) == ["document_approved", "document_rejected"]


def test_applicant_cannot_review_documents(client, applicant):
    document = _upload(client, applicant).json()["data"]["document"]
    response = client.put(
        f"{API}/documents/{document['id']}/status", json={"status": "approved"}, headers=applicant["headers"]
    )
    assert response.status_code == 403


def test_document_access_and_delete(client, db, applicant, other_applicant, admin):
    document = _upload(client, applicant).json()["data"]["document"]
    file_path = Path(db.query(Document).one().file_path)
    assert file_path.exists()

    assert client.get(f"{API}/documents/{document['id']}", headers=other_applicant["headers"]).status_code == 403
    assert client.delete(f"{API}/documents/{document['id']}", headers=other_applicant["headers"]).status_code == 403

    listed = client.get(f"{API}/documents/admin/all", headers=admin["headers"])
    assert listed.json()["data"]["pagination"]["total"] == 1

    deleted = client.delete(f"{API}/documents/{document['id']}", headers=applicant["headers"])
    assert deleted.status_code == 200
    assert not file_path.exists()
    assert client.get(f"{API}/documents/{document['id']}", headers=applicant["headers"]).status_code == 404


def test_document_types(client):
    response = client.get(f"{API}/documents/meta/types")
    values = [t["value"] for t in response.json()["data"]["documentTypes"]]
    assert "passport" in values and "bank_statement" in values


@pytest.fixture
def announcement(client, admin, applicant, other_applicant):
    response = client.post(
        f"{API}/notifications/broadcast",
        json={"title": "Holiday closure", "message": "Centers are closed on Friday", "priority": "high"},
        headers=admin["headers"],
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


def test_broadcast_reaches_every_user(client, applicant, other_applicant, admin, announcement):
    assert announcement["notificationsCreated"] == 3
    notifications = client.get(f"{API}/notifications/", headers=other_applicant["headers"]).json()["data"]["notifications"]
    assert notifications[0]["title"] == "Holiday closure"
    assert notifications[0]["type"] == "general_announcement"


def test_broadcast_to_listed_users(client, admin, applicant, other_applicant):
    response = client.post(
        f"{API}/notifications/broadcast",
        json={"title": "Reminder", "message": "Upload your photo", "targetUsers": [applicant["id"]], "expiresIn": 7},
        headers=admin["headers"],
    )
    assert response.json()["data"]["notificationsCreated"] == 1
    assert client.get(f"{API}/notifications/unread-count", headers=other_applicant["headers"]).json()["data"]["unreadCount"] == 0


def test_broadcast_is_admin_only(client, officer):
    response = client.post(
        f"{API}/notifications/broadcast", json={"title": "Hi", "message": "Hello"}, headers=officer["headers"]
    )
    assert response.status_code == 403


def test_read_archive_and_unread_count(client, applicant, announcement):
    def unread():
        return client.get(f"{API}/notifications/unread-count", headers=applicant["headers"]).json()["data"]["unreadCount"]

    assert unread() == 1
    notification = client.get(f"{API}/notifications/", headers=applicant["headers"]).json()["data"]["notifications"][0]

    read = client.put(f"{API}/notifications/{notification['id']}/read", headers=applicant["headers"])
    assert read.json()["data"]["notification"]["status"] == "read"
    assert read.json()["data"]["notification"]["readAt"] is not None
    assert unread() == 0

    archived = client.put(f"{API}/notifications/{notification['id']}/archive", headers=applicant["headers"])
    assert archived.json()["data"]["notification"]["status"] == "archived"

    filtered = client.get(f"{API}/notifications/", params={"status": "archived"}, headers=applicant["headers"])
    assert filtered.json()["data"]["pagination"]["total"] == 1


def test_mark_all_read(client, applicant, admin, announcement):
    client.post(
        f"{API}/notifications/broadcast", json={"title": "Second", "message": "Another one"}, headers=admin["headers"]
    )
    response = client.put(f"{API}/notifications/mark-all-read", headers=applicant["headers"])
    assert response.json()["data"]["updatedCount"] == 2
    assert client.get(f"{API}/notifications/unread-count", headers=applicant["headers"]).json()["data"]["unreadCount"] == 0


def test_delete_notification_permissions(client, applicant, other_applicant, admin, announcement):
    notification = client.get(f"{API}/notifications/", headers=applicant["headers"]).json()["data"]["notifications"][0]

    assert client.delete(f"{API}/notifications/{notification['id']}", headers=other_applicant["headers"]).status_code == 404
    assert client.put(f"{API}/notifications/{notification['id']}/read", headers=other_applicant["headers"]).status_code == 404

    assert client.delete(f"{API}/notifications/{notification['id']}", headers=admin["headers"]).status_code == 200
    assert client.get(f"{API}/notifications/", headers=applicant["headers"]).json()["data"]["pagination"]["total"] == 0


def test_notification_types(client, applicant):
    response = client.get(f"{API}/notifications/types", headers=applicant["headers"])
    types = {t["value"]: t["label"] for t in response.json()["data"]["types"]}
    assert types["farewell"] == "Application Complete"
    assert len(types) == 16


def test_health_and_root(client):
    health = client.get("/health")
    assert health.status_code == 200
    assert health.json()["data"]["database"]["connected"] is True
    assert "X-Process-Time" in health.headers

    root = client.get("/")
    assert root.json()["success"] is True
