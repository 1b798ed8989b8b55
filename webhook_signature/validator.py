"""
Request validation for signed webhooks.

The Validator composes the freshness check and the signature check and works
against any request object exposing header lookup, the raw query string and a
replaceable body stream. See webhook_signature.middleware for the Starlette /
FastAPI adapters.
"""

import functools
import io
import logging
import time
from typing import Any, BinaryIO, Callable, Dict, Mapping, Optional, Protocol, Tuple, TypeVar

from webhook_signature.errors import BodyReadError, MissingHeader, SignatureValidationError
from webhook_signature.freshness import DEFAULT_VALIDITY_WINDOW, check_timestamp
from webhook_signature.metrics import record_validation_outcome
from webhook_signature.signature import Key, key_bytes, check_signature, sign


logger = logging.getLogger(__name__)

# Header names are fixed by the protocol contract with the sender
TIMESTAMP_HEADER = "MessageBird-Request-Timestamp"
SIGNATURE_HEADER = "MessageBird-Signature"


class SignedRequest(Protocol):
    """The narrow view of an inbound request the Validator depends on."""

    headers: Mapping[str, str]
    query_string: str
    body: BinaryIO


R = TypeVar("R", bound=SignedRequest)


class Validator:
    """
    Validates the signature and timestamp of inbound webhook requests.

    Instances are immutable and safe to share between concurrent requests.

    Args:
        signing_key: Shared secret provided by the sender
        window: Acceptance window in seconds; None disables the freshness check
        clock: Returns the current Unix time, time.time by default
    """

    __slots__ = ("_key", "_window", "_clock")

    def __init__(
        self,
        signing_key: Key,
        window: Optional[float] = DEFAULT_VALIDITY_WINDOW,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if window is not None and window <= 0:
            raise ValueError("window must be positive or None")
        self._key = key_bytes(signing_key)
        self._window = window
        self._clock = clock

    def __repr__(self) -> str:
        return f"Validator(signing_key=<redacted>, window={self._window!r})"

    @property
    def window(self) -> Optional[float]:
        return self._window

    # =========================================================================
    # Signing
    # =========================================================================

    def sign(self, timestamp: str, raw_query: str, body: bytes) -> str:
        """Compute the base64 signature for the given request parts."""
        return sign(self._key, timestamp, raw_query, body)

    def signature_headers(
        self,
        body: bytes,
        raw_query: str = "",
        timestamp: Optional[str] = None,
    ) -> Dict[str, str]:
        """
        Build the headers a sender attaches to a request.

        Args:
            body: Raw request body
            raw_query: Query string the request is sent with
            timestamp: Timestamp to sign; defaults to the current clock time

        Returns:
            Dict with the timestamp and signature headers
        """
        if timestamp is None:
            timestamp = str(int(self._clock()))
        return {
            TIMESTAMP_HEADER: timestamp,
            SIGNATURE_HEADER: self.sign(timestamp, raw_query, body),
        }

    # =========================================================================
    # Verification
    # =========================================================================

    def check(self, timestamp: str, raw_query: str, body: bytes, signature: str) -> None:
        """
        Check freshness first, then the signature.

        Raises:
            SignatureValidationError: a subclass naming the failed check
        """
        check_timestamp(timestamp, self._window, self._clock())
        check_signature(self._key, timestamp, raw_query, body, signature)

    def is_valid(self, timestamp: str, raw_query: str, body: bytes, signature: str) -> bool:
        try:
            self.check(timestamp, raw_query, body, signature)
        except SignatureValidationError:
            return False
        return True

    def _rejected(self, error: SignatureValidationError) -> None:
        logger.warning("Request signature rejected", extra={"reason": error.reason})
        record_validation_outcome(error.reason)

    def read_headers(self, headers: Mapping[str, str]) -> Tuple[str, str]:
        """
        Extract the timestamp and signature headers.

        An empty header counts as missing.

        Raises:
            MissingHeader: either header is absent
        """
        timestamp = headers.get(TIMESTAMP_HEADER)
        signature = headers.get(SIGNATURE_HEADER)
        if not timestamp or not signature:
            error = MissingHeader()
            self._rejected(error)
            raise error
        return timestamp, signature

    def verify(self, timestamp: str, signature: str, raw_query: str, body: bytes) -> None:
        """
        Run check() and log and record the outcome. Used by every request adapter.

        Raises:
            SignatureValidationError: on any failure
        """
        try:
            self.check(timestamp, raw_query, body, signature)
        except SignatureValidationError as e:
            self._rejected(e)
            raise

        logger.debug(f"Request signature valid, body length: {len(body)} bytes")
        record_validation_outcome("valid")

    def validate(self, request: SignedRequest) -> bytes:
        """
        Validate a request and leave its body re-readable.

        Headers are checked before the body is touched. The body stream is
        then read completely and, on success, replaced with a new stream
        positioned at the start.

        Args:
            request: Object with ``headers``, ``query_string`` and ``body``

        Returns:
            The body bytes

        Raises:
            SignatureValidationError: the request must be rejected
            BodyReadError: the body stream could not be read
        """
        timestamp, signature = self.read_headers(request.headers)

        try:
            body = request.body.read()
        except OSError as e:
            logger.error(f"Failed to read request body: {e}")
            record_validation_outcome("body_read_error")
            raise BodyReadError("request body could not be read") from e

        self.verify(timestamp, signature, request.query_string, body)
        request.body = io.BytesIO(body)
        return body

    def wrap(self, handler: Callable[[R], Any]) -> Callable[[R], Any]:
        """
        Put signature validation in front of a request handler.

        The returned callable validates the request and only then delegates.
        On failure the SignatureValidationError propagates and the handler is
        never called.
        """

        @functools.wraps(handler)
        def guarded(request: R) -> Any:
            self.validate(request)
            return handler(request)

        return guarded
