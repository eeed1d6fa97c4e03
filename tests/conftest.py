"""Test configuration and fixtures."""

import os

import logfire
import pytest

# Settings are read from the environment when a container first resolves
# them, so these must be in place before any test builds one.
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("AUTH__JWT_SECRET", "test-jwt-secret-0123456789abcdefghijklmnop")
os.environ.setdefault("AUTH__API_SECRET_KEY", "test-shared-secret-0123456789abcdefghij")
os.environ.setdefault("AUTH__BCRYPT_ROUNDS", "4")

# Spans are neither printed nor exported during tests
logfire.configure(send_to_logfire=False, console=False)


@pytest.fixture
def api_secret_key() -> str:
    """Shared secret the test container is configured with."""
    return os.environ["AUTH__API_SECRET_KEY"]
