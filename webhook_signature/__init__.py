"""
Validation of HMAC-SHA256 signed webhook requests.
"""

from webhook_signature.errors import (
    BodyReadError,
    MalformedSignature,
    MalformedTimestamp,
    MissingHeader,
    SignatureMismatch,
    SignatureValidationError,
    StaleOrFutureTimestamp,
)
from webhook_signature.freshness import DEFAULT_VALIDITY_WINDOW
from webhook_signature.validator import SIGNATURE_HEADER, TIMESTAMP_HEADER, Validator

__all__ = [
    "BodyReadError",
    "DEFAULT_VALIDITY_WINDOW",
    "MalformedSignature",
    "MalformedTimestamp",
    "MissingHeader",
    "SIGNATURE_HEADER",
    "SignatureMismatch",
    "SignatureValidationError",
    "StaleOrFutureTimestamp",
    "TIMESTAMP_HEADER",
    "Validator",
]
