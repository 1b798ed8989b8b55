"""
Pytest configuration and shared fixtures.

The receiver settings are read from the environment; a test signing key is
seeded here and the settings cache cleared before any app imports.
"""

import os

import pytest

os.environ.setdefault("SIGNING_KEY", "test-signing-key")

from webhook_signature.config import get_settings  # noqa: E402
from webhook_signature.validator import Validator  # noqa: E402

get_settings.cache_clear()


class FixedClock:
    """Callable clock returning a settable Unix time."""

    def __init__(self, now: float):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(1_000_000_000.0)


@pytest.fixture
def validator(clock) -> Validator:
    """Validator with key "secret", the default window and a frozen clock."""
    return Validator("secret", clock=clock)
