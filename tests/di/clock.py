"""Controllable clock for testing."""

from datetime import datetime, timedelta, timezone

from dishka import Provider, Scope, provide

from idp.util.clock import Clock


class FakeClock(Clock):
    """Clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        """Move forward by ``timedelta(**kwargs)``."""
        self.current += timedelta(**kwargs)


class FakeClockProvider(Provider):
    """Replaces the system clock; tests advance it through ``FakeClock``."""

    scope = Scope.APP

    @provide
    def get_fake_clock(self) -> FakeClock:
        return FakeClock()

    @provide
    def get_clock(self, clock: FakeClock) -> Clock:
        return clock
