"""Tests for the FastAPI backend."""

import io
import re

import pytest
from fastapi.testclient import TestClient
from PIL import Image

import server
from refunddesk import runtime

DISPUTES_YAML = """
disputes:
  - id: 7
    customerName: Noor
    issue: Duplicate subscription charge
    status: OPEN
    createdAt: "2024-01-04T09:00:00"
    updatedAt: "2024-01-05T09:00:00"
  - id: 8
    customerName: Luis
    issue: Package lost in transit
    status: RESOLVED
    createdAt: "2024-01-02T09:00:00"
    updatedAt: "2024-01-09T09:00:00"
  - id: 9
    customerName: Mei
    issue: Unauthorized charge
    status: OPEN
    createdAt: "2024-01-01T09:00:00"
    updatedAt: "2024-01-01T09:00:00"
"""


@pytest.fixture
def client(tmp_path, monkeypatch):
    disputes = tmp_path / "disputes.yaml"
    disputes.write_text(DISPUTES_YAML)
    monkeypatch.setenv("REFUNDDESK_CONFIG", str(tmp_path / "absent.yaml"))
    monkeypatch.setenv("HISTORY_PATH", str(tmp_path / "history.json"))
    monkeypatch.setenv("DISPUTES_PATH", str(disputes))
    monkeypatch.delenv("MAX_FILE_SIZE_BYTES", raising=False)
    monkeypatch.delenv("FORM_VARIANT", raising=False)
    runtime.reset_runtime()
    with TestClient(server.app) as test_client:
        yield test_client
    runtime.reset_runtime()


def create_session(client):
    response = client.post("/api/sessions")
    assert response.status_code == 201
    return response.json()["sessionId"]


def set_field(client, session_id, field, value):
    response = client.post(f"/api/sessions/{session_id}/fields/{field}", data={"value": value})
    assert response.status_code == 200
    return response.json()


def png_bytes():
    buffer = io.BytesIO()
    Image.new("RGB", (900, 300), (16, 185, 129)).save(buffer, format="PNG")
    return buffer.getvalue()


def test_healthcheck(client):
    assert client.get("/healthz").json() == {"status": "ok"}


def test_new_session_snapshot(client):
    payload = client.post("/api/sessions").json()

    assert [f["name"] for f in payload["fields"]] == [
        "transactionId", "customerEmail", "reason", "description", "proofFileName"
    ]
    assert payload["isFormValid"] is False
    assert payload["successMessage"] is None
    assert payload["highlights"]["activeKey"] == "Secure evidence handling"
    assert payload["reasonOptions"][0] == "Product not received"


def test_full_submission(client):
    session_id = create_session(client)
    set_field(client, session_id, "transactionId", "TXN-5501")
    set_field(client, session_id, "customerEmail", "noor@example.com")
    payload = set_field(client, session_id, "reason", "Duplicate charge")
    assert payload["isFormValid"] is True

    response = client.post(f"/api/sessions/{session_id}/submit")
    payload = response.json()

    assert payload["accepted"] is True
    case_id = payload["submission"]["caseId"]
    assert re.match(r"^RFD-[0-9A-Z]{5}$", case_id)
    assert payload["successMessage"] == (
        f"Refund request submitted. Your Case ID is {case_id}. "
        "We'll get back to you within 48 hours."
    )
    assert all(f["value"] == "" for f in payload["fields"])

    history = client.get("/api/history").json()["entries"]
    assert history[0]["caseId"] == case_id

    copied = client.post(f"/api/sessions/{session_id}/copy").json()
    assert copied["copied"] is True


def test_blocked_submission_shows_errors(client):
    session_id = create_session(client)
    payload = client.post(f"/api/sessions/{session_id}/submit").json()

    assert payload["accepted"] is False
    assert payload["submission"] is None
    errors = {f["name"]: f["error"] for f in payload["fields"]}
    assert errors["transactionId"] == "Transaction ID is required."
    assert errors["customerEmail"] == "Customer email is required."
    assert errors["reason"] == "Choose a reason for the dispute."
    assert errors["description"] is None


def test_copy_before_submit_is_rejected(client):
    session_id = create_session(client)
    assert client.post(f"/api/sessions/{session_id}/copy").status_code == 400


def test_unknown_field_is_bad_request(client):
    session_id = create_session(client)
    response = client.post(f"/api/sessions/{session_id}/fields/nickname", data={"value": "x"})

    assert response.status_code == 400
    assert response.json()["detail"]["error_type"] == "UNKNOWN_FIELD"


def test_attachment_flow(client):
    session_id = create_session(client)
    url = f"/api/sessions/{session_id}/attachment"

    oversized = b"0" * (5 * 1024 * 1024 + 1)
    payload = client.post(url, files={"file": ("big.pdf", oversized, "application/pdf")}).json()
    assert payload["attachment"] is None
    assert payload["attachmentError"] == "File must be 5MB or smaller."
    assert payload["fileInputKey"] == 1

    payload = client.post(url, files={"file": ("shot.png", png_bytes(), "image/png")}).json()
    assert payload["attachmentError"] is None
    assert payload["attachment"]["fileName"] == "shot.png"
    assert payload["attachment"]["kind"] == "image"
    assert payload["attachment"]["previewLoaded"] is True
    assert payload["attachment"]["previewData"].startswith("data:image/png;base64,")

    payload = client.post(url).json()
    assert payload["attachment"] is None
    assert payload["fileInputKey"] == 2

    client.post(url, files={"file": ("receipt.pdf", b"%PDF-1.4", "application/pdf")})
    payload = client.delete(url).json()
    assert payload["attachment"] is None
    assert payload["fileInputKey"] == 3


def test_drag_state(client):
    session_id = create_session(client)
    url = f"/api/sessions/{session_id}/attachment/drag"
    assert client.post(url, data={"active": "true"}).json()["isDraggingFile"] is True
    assert client.post(url, data={"active": "false"}).json()["isDraggingFile"] is False


def test_rotation_endpoints(client):
    session_id = create_session(client)
    base = f"/api/sessions/{session_id}/rotation/highlights"

    payload = client.post(f"{base}/interact", data={"key": "Dedicated dispute guidance"}).json()
    assert payload["highlights"]["activeKey"] == "Dedicated dispute guidance"
    assert payload["highlights"]["autoRotateEnabled"] is False
    assert payload["highlights"]["idleResumeDeadline"] is not None

    payload = client.post(f"{base}/release").json()
    assert payload["highlights"]["mode"] == "paused-idle-countdown"

    response = client.post(f"{base}/interact", data={"key": "Nope"})
    assert response.status_code == 400
    assert response.json()["detail"]["error_type"] == "UNKNOWN_ROTATION_MEMBER"


def test_estimate_endpoint(client):
    session_id = create_session(client)
    payload = client.post(
        f"/api/sessions/{session_id}/estimate",
        data={"evidence_confidence": "30", "merchant_response_hours": "72"},
    ).json()

    assert payload["sliders"] == {"evidenceConfidence": 30, "merchantResponseHours": 72}
    assert payload["estimate"]["resolutionDays"] == 11


def test_dispute_listing(client):
    payload = client.get("/api/disputes").json()
    assert [d["id"] for d in payload["disputes"]] == [9, 8, 7]

    payload = client.get("/api/disputes", params={"status": "open"}).json()
    assert payload["status"] == "OPEN"
    assert [d["id"] for d in payload["disputes"]] == [9, 7]

    payload = client.get("/api/disputes", params={"status": "in progress"}).json()
    assert payload["count"] == 0
    assert payload["emptyMessage"]

    assert client.get("/api/disputes", params={"status": "bogus"}).status_code == 400


def test_session_deletion(client):
    session_id = create_session(client)
    assert client.delete(f"/api/sessions/{session_id}").json()["status"] == "closed"
    assert client.get(f"/api/sessions/{session_id}").status_code == 404
    assert client.delete(f"/api/sessions/{session_id}").status_code == 404
    assert session_id not in server.sessions


def test_shutdown_tears_down_sessions(tmp_path, monkeypatch):
    monkeypatch.setenv("REFUNDDESK_CONFIG", str(tmp_path / "absent.yaml"))
    monkeypatch.setenv("HISTORY_PATH", str(tmp_path / "history.json"))
    runtime.reset_runtime()
    with TestClient(server.app) as test_client:
        session_id = create_session(test_client)
        session = server.sessions[session_id]
    assert session.closed
    assert server.sessions == {}
    runtime.reset_runtime()


def test_unreadable_dispute_file_is_reported(tmp_path, monkeypatch):
    disputes = tmp_path / "disputes.yaml"
    disputes.write_text("- not: a mapping\n")
    monkeypatch.setenv("REFUNDDESK_CONFIG", str(tmp_path / "absent.yaml"))
    monkeypatch.setenv("HISTORY_PATH", str(tmp_path / "history.json"))
    monkeypatch.setenv("DISPUTES_PATH", str(disputes))
    runtime.reset_runtime()
    with TestClient(server.app) as test_client:
        response = test_client.get("/api/disputes")
    runtime.reset_runtime()

    assert response.status_code == 500
    assert response.json()["detail"]["error_type"] == "DISPUTE_DATA_INVALID"
