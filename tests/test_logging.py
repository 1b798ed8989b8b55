"""
Tests for structured JSON logging.
"""

import json
import logging

from webhook_signature.logging_utils import CustomJsonFormatter, request_id_ctx


def format_record(message: str, **extra) -> dict:
    formatter = CustomJsonFormatter('%(ts)s %(level)s %(name)s %(message)s')
    record = logging.LogRecord(
        "webhook_signature.validator", logging.WARNING, __file__, 1, message, None, None
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return json.loads(formatter.format(record))


class TestCustomJsonFormatter:

    def test_standard_fields(self):
        data = format_record("Request signature rejected", reason="signature_mismatch")

        assert data["message"] == "Request signature rejected"
        assert data["level"] == "WARNING"
        assert data["name"] == "webhook_signature.validator"
        assert data["reason"] == "signature_mismatch"
        assert data["ts"].endswith("Z")

    def test_request_id_from_context(self):
        token = request_id_ctx.set("req-123")
        try:
            data = format_record("Request completed")
        finally:
            request_id_ctx.reset(token)

        assert data["request_id"] == "req-123"

    def test_no_request_id_outside_request(self):
        assert "request_id" not in format_record("startup")
