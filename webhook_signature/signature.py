"""
HMAC-SHA256 request signatures.

The signed message is:

    TIMESTAMP + "\\n" + CANONICAL_QUERY + "\\n" + SHA256(BODY)

where SHA256(BODY) is the raw 32-byte digest and CANONICAL_QUERY is the query
string re-encoded with its keys sorted. The signature travels base64-encoded.
"""

import base64
import binascii
import hashlib
import hmac
import re
from typing import List, Tuple, Union
from urllib.parse import unquote_plus, urlencode

from webhook_signature.errors import MalformedSignature, SignatureMismatch


Key = Union[bytes, str]


def key_bytes(key: Key) -> bytes:
    """Signing keys may be given as str; they are signed as UTF-8."""
    if isinstance(key, str):
        return key.encode("utf-8")
    return bytes(key)


# =============================================================================
# Signature Computation
# =============================================================================

# '%' not followed by two hex digits
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def _query_pairs(raw_query: str) -> List[Tuple[str, str]]:
    """
    Split a query string into unescaped (key, value) pairs.

    Each str character stands for one byte (latin-1), so invalid UTF-8 escapes
    survive unescaping and re-encoding unchanged. Pieces containing ';' or a
    malformed '%' escape are dropped.
    """
    pairs = []
    for piece in raw_query.split("&"):
        if not piece or ";" in piece:
            continue
        key, _, value = piece.partition("=")
        if _BAD_ESCAPE.search(key) or _BAD_ESCAPE.search(value):
            continue
        pairs.append((
            unquote_plus(key, encoding="latin-1"),
            unquote_plus(value, encoding="latin-1"),
        ))
    return pairs


def canonical_query(raw_query: str) -> str:
    """
    Re-encode a raw query string in a deterministic form.

    Pairs are sorted by key bytes only; repeated keys keep their original
    relative order. Spaces become '+', every byte outside ``A-Za-z0-9-_.~``
    is percent-encoded. Escaped bytes are kept exactly, whether or not they
    form valid UTF-8; literal non-ASCII characters are taken as UTF-8.

    Args:
        raw_query: Query string as received, with or without a leading '?'

    Returns:
        Canonical query string (empty string for an empty query)
    """
    if raw_query.startswith("?"):
        raw_query = raw_query[1:]
    raw_query = raw_query.encode("utf-8").decode("latin-1")
    pairs = _query_pairs(raw_query)
    # list.sort is stable: values of a repeated key stay in sender order
    pairs.sort(key=lambda pair: pair[0])
    return urlencode(pairs, encoding="latin-1")


def signed_message(timestamp: str, query: str, body: bytes) -> bytes:
    """Build the exact byte sequence that gets signed."""
    body_digest = hashlib.sha256(body).digest()
    return b"\n".join(
        [timestamp.encode("utf-8"), query.encode("utf-8"), body_digest]
    )


def compute_signature(key: Key, timestamp: str, raw_query: str, body: bytes) -> bytes:
    """
    Compute the HMAC-SHA256 digest for a request.

    Args:
        key: Shared signing key
        timestamp: Timestamp header value, exactly as sent
        raw_query: Raw query string; canonicalized before signing
        body: Raw request body

    Returns:
        32-byte digest
    """
    message = signed_message(timestamp, canonical_query(raw_query), body)
    return hmac.new(key_bytes(key), message, hashlib.sha256).digest()


def encode_signature(digest: bytes) -> str:
    """Standard, padded base64 as carried in the signature header."""
    return base64.b64encode(digest).decode("ascii")


def sign(key: Key, timestamp: str, raw_query: str, body: bytes) -> str:
    """Compute the base64 signature a sender puts on a request."""
    return encode_signature(compute_signature(key, timestamp, raw_query, body))


# =============================================================================
# Verification
# =============================================================================

def decode_signature(signature: str) -> bytes:
    """
    Strictly decode a base64 signature.

    Raises:
        MalformedSignature: if the value is not valid standard base64
    """
    try:
        return base64.b64decode(signature, validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedSignature() from e


def check_signature(
    key: Key,
    timestamp: str,
    raw_query: str,
    body: bytes,
    signature: str,
) -> None:
    """
    Check a supplied signature against the expected one.

    Raises:
        MalformedSignature: signature is not valid base64
        SignatureMismatch: digests differ
    """
    supplied = decode_signature(signature)
    expected = compute_signature(key, timestamp, raw_query, body)

    # Use constant-time comparison to prevent timing attacks
    if not hmac.compare_digest(supplied, expected):
        raise SignatureMismatch()


def verify_signature(
    key: Key,
    timestamp: str,
    raw_query: str,
    body: bytes,
    signature: str,
) -> bool:
    """Return True if the signature matches, False for any failure."""
    try:
        check_signature(key, timestamp, raw_query, body, signature)
    except (MalformedSignature, SignatureMismatch):
        return False
    return True
