"""API integration tests for the SMS ledger."""

from fastapi.testclient import TestClient

from main import app
from smsbook.api import routes
from smsbook.api.dependencies import get_app_settings
from smsbook.core.settings import AppSettings

client = TestClient(app)
HTTP_200_OK = 200
HTTP_202_ACCEPTED = 202
HTTP_422_UNPROCESSABLE = 422


def test_health() -> None:
    """Test the /health endpoint returns status ok."""
    response = client.get("/health")
    if response.status_code != HTTP_200_OK:
        msg = f"Expected status {HTTP_200_OK}, got {response.status_code}"
        raise AssertionError(msg)
    if response.json() != {"status": "ok"}:
        msg = f"Expected response {{'status': 'ok'}}, got {response.json()}"
        raise AssertionError(msg)


def test_scalar_docs() -> None:
    """Test the /scalar endpoint returns OpenAPI or Swagger docs."""
    response = client.get("/scalar")
    if response.status_code != HTTP_200_OK:
        msg = f"Expected status {HTTP_200_OK}, got {response.status_code}"
        raise AssertionError(msg)
    if not ("openapi" in response.text or "swagger" in response.text):
        msg = "Expected 'openapi' or 'swagger' in response text"
        raise AssertionError(msg)


def test_classify_approved_and_rejected() -> None:
    """The classify endpoint returns the heuristic verdict."""
    app.dependency_overrides[get_app_settings] = lambda: AppSettings()
    try:
        approved = client.post(
            "/sms/classify", json={"address": "AX-ICICIB", "body": "Rs.500 debited from A/c for UPI payment"}
        )
        rejected = client.post("/sms/classify", json={"address": "AXISBK", "body": "Your OTP is 1234"})
    finally:
        app.dependency_overrides.clear()
    body = approved.json()
    if approved.status_code != HTTP_200_OK or body["status"] != "approved" or body["is_income"] is not False:
        msg = f"Expected an approved expense, got {approved.status_code} {body}"
        raise AssertionError(msg)
    if body["amount"] != "500" or body["currency"] != "INR":
        msg = f"Expected 500 INR, got {body}"
        raise AssertionError(msg)
    if rejected.json() != {
        "status": "rejected",
        "reason": "OTP detected",
        "normalized_sender": "axisbk",
        "normalized_body": "your otp is 1234",
    }:
        msg = f"Unexpected rejection payload {rejected.json()}"
        raise AssertionError(msg)


def test_submit_sms_schedules_background_processing(monkeypatch) -> None:
    """POST /sms accepts the message and hands it to the background entry point."""
    received = []
    monkeypatch.setattr(routes, "on_background_message", lambda event, processor: received.append(event))
    response = client.post("/sms", json={"address": "HDFCBK", "body": "INR 2000 credited to your account"})
    if response.status_code != HTTP_202_ACCEPTED or response.json() != {"status": "accepted"}:
        msg = f"Expected 202 accepted, got {response.status_code} {response.text}"
        raise AssertionError(msg)
    if len(received) != 1 or received[0].address != "HDFCBK":
        msg = f"Expected one background call, got {received}"
        raise AssertionError(msg)


def test_submit_sms_validates_body() -> None:
    """Malformed payloads are rejected by validation."""
    response = client.post("/sms", json=["not", "an", "object"])
    if response.status_code != HTTP_422_UNPROCESSABLE:
        msg = f"Expected {HTTP_422_UNPROCESSABLE}, got {response.status_code}"
        raise AssertionError(msg)
