"""In-memory OTP repositories for testing."""

import asyncio
from datetime import datetime, timedelta
from itertools import count
from typing import Optional

from idp.domain.model.otp import OtpRateLimit, OtpRequest
from idp.domain.repository.otp import OtpRateLimitRepository, OtpRequestRepository
from idp.domain.value import OtpRequestId


class InMemoryOtpRequestRepository(OtpRequestRepository):
    """In-memory implementation of OtpRequestRepository for testing."""

    def __init__(self) -> None:
        self._requests: dict[OtpRequestId, OtpRequest] = {}
        self._ids = count(1)

    async def next_id(self) -> OtpRequestId:
        return OtpRequestId(next(self._ids))

    async def add(self, request: OtpRequest) -> OtpRequest:
        self._requests[request.id] = request
        return request

    async def find_latest(self, identifier: str) -> Optional[OtpRequest]:
        """Newest request by creation time, ties broken by id."""
        matches = [r for r in self._requests.values() if r.identifier == identifier]
        if not matches:
            return None
        return max(matches, key=lambda r: (r.created_at, r.id))

    async def increment_attempts(self, request_id: OtpRequestId) -> int:
        request = self._requests[request_id]
        updated = request.model_copy(update={"attempt_count": request.attempt_count + 1})
        self._requests[request_id] = updated
        return updated.attempt_count

    async def mark_used(self, request_id: OtpRequestId) -> bool:
        request = self._requests.get(request_id)
        if request is None or request.is_used:
            return False
        self._requests[request_id] = request.model_copy(update={"is_used": True})
        return True


class InMemoryOtpRateLimitRepository(OtpRateLimitRepository):
    """In-memory implementation of OtpRateLimitRepository for testing."""

    def __init__(self) -> None:
        self._limits: dict[str, OtpRateLimit] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    async def find_by_identifier(self, identifier: str) -> Optional[OtpRateLimit]:
        return self._limits.get(identifier)

    async def consume(
        self,
        identifier: str,
        now: datetime,
        max_requests: int,
        window: timedelta,
    ) -> bool:
        """Apply one send to the identifier's window under a per-identifier lock."""
        lock = self._locks.setdefault(identifier, asyncio.Lock())
        async with lock:
            current = self._limits.get(identifier) or OtpRateLimit(
                identifier=identifier, window_start=now
            )
            state, allowed = current.consume(now, max_requests, window)
            self._limits[identifier] = state
            return allowed
