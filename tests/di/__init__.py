"""Mock providers for testing."""

from .clock import FakeClock, FakeClockProvider
from .notification import MockNotificationProvider
from .persistence import MockPersistenceProvider
from .container import build_test_container

__all__ = [
    "FakeClock",
    "FakeClockProvider",
    "MockNotificationProvider",
    "MockPersistenceProvider",
    "build_test_container",
]
