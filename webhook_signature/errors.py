"""
Exceptions raised while validating signed webhook requests.

Every validation failure shares the same public message so a caller cannot
tell which check rejected the request. The ``reason`` attribute is meant for
internal logs and metrics only.
"""

PUBLIC_MESSAGE = "invalid signature"


class SignatureValidationError(Exception):
    """Base class for all request validation failures."""

    reason = "invalid"

    def __init__(self) -> None:
        super().__init__(PUBLIC_MESSAGE)


class MissingHeader(SignatureValidationError):
    """Timestamp or signature header is absent or empty."""

    reason = "missing_header"


class MalformedTimestamp(SignatureValidationError):
    """Timestamp header is not a Unix epoch integer."""

    reason = "malformed_timestamp"


class StaleOrFutureTimestamp(SignatureValidationError):
    """Timestamp lies outside the acceptance window."""

    reason = "stale_or_future_timestamp"


class MalformedSignature(SignatureValidationError):
    """Signature header is not valid base64."""

    reason = "malformed_signature"


class SignatureMismatch(SignatureValidationError):
    """Computed digest differs from the supplied one."""

    reason = "signature_mismatch"


class BodyReadError(Exception):
    """
    The request body could not be read.

    A transport fault, not a SignatureValidationError. HTTP adapters answer
    it with 400 instead of 401.
    """
