"""
Timestamp freshness checks.

The acceptance interval is shifted by half the window so it is centered on
the current time: a request is fresh iff ``0 < (now + window/2) - ts < window``.
"""

import re
import time
from typing import Optional

from webhook_signature.errors import MalformedTimestamp, StaleOrFutureTimestamp


# Window of acceptance in seconds
DEFAULT_VALIDITY_WINDOW = 5.0

_INT64_MIN = -(2 ** 63)
_INT64_MAX = 2 ** 63 - 1

# int() also accepts whitespace, underscores and non-ASCII digits
_TIMESTAMP_RE = re.compile(r"[+-]?[0-9]+")


def parse_timestamp(value: str) -> int:
    """
    Parse a Unix epoch timestamp in seconds.

    Raises:
        MalformedTimestamp: value is not a signed 64-bit decimal integer
    """
    if not _TIMESTAMP_RE.fullmatch(value):
        raise MalformedTimestamp()
    seconds = int(value)
    if not _INT64_MIN <= seconds <= _INT64_MAX:
        raise MalformedTimestamp()
    return seconds


def check_timestamp(
    value: str,
    window: Optional[float],
    now: Optional[float] = None,
) -> int:
    """
    Check that a timestamp is parseable and within the acceptance window.

    Args:
        value: Timestamp header value
        window: Window length in seconds, or None to skip the freshness check
        now: Current Unix time; defaults to time.time()

    Returns:
        The parsed timestamp

    Raises:
        MalformedTimestamp: value is not an integer
        StaleOrFutureTimestamp: value lies outside the window
    """
    seconds = parse_timestamp(value)
    if window is None:
        return seconds

    if now is None:
        now = time.time()

    diff = (now + window / 2) - seconds
    if not 0 < diff < window:
        raise StaleOrFutureTimestamp()
    return seconds


def is_fresh(value: str, window: Optional[float], now: Optional[float] = None) -> bool:
    try:
        check_timestamp(value, window, now)
    except (MalformedTimestamp, StaleOrFutureTimestamp):
        return False
    return True
