"""
Tests for the webhook receiver service.

Tests cover:
- Health probes
- Signed POST /webhook accepted, unsigned rejected
- Window configuration from settings
- Metrics exposure
"""

import pytest
from fastapi.testclient import TestClient

from webhook_signature.config import Settings, get_settings
from webhook_signature.main import create_app
from webhook_signature.validator import TIMESTAMP_HEADER, Validator


TEST_SIGNING_KEY = "receiver-secret"


def make_settings(**overrides) -> Settings:
    values = {"SIGNING_KEY": TEST_SIGNING_KEY, "LOG_LEVEL": "DEBUG"}
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def sender() -> Validator:
    """Signs requests the way the sending party does."""
    return Validator(TEST_SIGNING_KEY)


@pytest.fixture
def client():
    with TestClient(create_app(make_settings())) as test_client:
        yield test_client


class TestSettings:

    def test_loaded_from_environment(self):
        settings = get_settings()
        assert settings.SIGNING_KEY.get_secret_value() == "test-signing-key"
        assert settings.VALIDITY_WINDOW == 5.0
        assert settings.PROTECTED_PATHS == ["/webhook"]

    def test_key_hidden_in_repr(self):
        assert TEST_SIGNING_KEY not in repr(make_settings())

    def test_non_positive_window_disables_check(self):
        assert make_settings(VALIDITY_WINDOW=0).build_validator().window is None
        assert make_settings(VALIDITY_WINDOW=30).build_validator().window == 30


class TestHealth:

    def test_live(self, client):
        response = client.get("/health/live")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_ready(self, client):
        response = client.get("/health/ready")
        assert response.status_code == 200
        assert response.json()["status"] == "ready"


class TestWebhook:

    def test_signed_request_accepted(self, client, sender):
        body = b'{"id":"m1","status":"delivered"}'
        response = client.post("/webhook", content=body, headers=sender.signature_headers(body))

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "bytes": len(body)}
        assert "X-Request-ID" in response.headers

    def test_signed_request_with_query(self, client, sender):
        body = b"payload"
        headers = sender.signature_headers(body, raw_query="reference=42&channel=sms")
        response = client.post("/webhook?channel=sms&reference=42", content=body, headers=headers)
        assert response.status_code == 200

    def test_unsigned_request_rejected(self, client):
        response = client.post("/webhook", content=b"payload")

        assert response.status_code == 401
        assert response.json() == {"detail": "invalid signature"}

    def test_stale_request_rejected(self, client, sender):
        body = b"payload"
        headers = sender.signature_headers(body, timestamp="1000000000")
        response = client.post("/webhook", content=body, headers=headers)
        assert response.status_code == 401

    def test_disabled_window_accepts_old_request(self, sender):
        app = create_app(make_settings(VALIDITY_WINDOW=0))
        body = b"payload"
        headers = sender.signature_headers(body, timestamp="1000000000")

        with TestClient(app) as client:
            response = client.post("/webhook", content=body, headers=headers)
        assert response.status_code == 200

    def test_wrong_key_rejected(self, client):
        body = b"payload"
        headers = Validator("not-the-key").signature_headers(body)
        response = client.post("/webhook", content=body, headers=headers)
        assert response.status_code == 401

    def test_malformed_timestamp_rejected(self, client, sender):
        body = b"payload"
        headers = sender.signature_headers(body)
        headers[TIMESTAMP_HEADER] = "yesterday"
        response = client.post("/webhook", content=body, headers=headers)
        assert response.status_code == 401


class TestMetrics:

    def test_validation_outcomes_exposed(self, client, sender):
        client.post("/webhook", content=b"x", headers=sender.signature_headers(b"x"))
        client.post("/webhook", content=b"x")

        response = client.get("/metrics")

        assert response.status_code == 200
        assert 'signature_validations_total{result="valid"}' in response.text
        assert 'signature_validations_total{result="missing_header"}' in response.text
        assert "http_requests_total" in response.text
