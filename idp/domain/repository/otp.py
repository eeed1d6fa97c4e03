"""OTP repository interfaces.

Both repositories expose atomic operations so concurrent requests cannot
double-spend a code or slip past the send throttle.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Optional

from idp.domain.model.otp import OtpRateLimit, OtpRequest
from idp.domain.value import OtpRequestId


class OtpRequestRepository(ABC):
    """Repository for issued one-time codes."""

    @abstractmethod
    async def next_id(self) -> OtpRequestId:
        """Reserve an identifier for a new request."""
        pass

    @abstractmethod
    async def add(self, request: OtpRequest) -> OtpRequest:
        """Store a newly issued code."""
        pass

    @abstractmethod
    async def find_latest(self, identifier: str) -> Optional[OtpRequest]:
        """Find the most recently issued request for an identifier.

        Args:
            identifier: Normalized identifier

        Returns:
            The newest request regardless of state, None if none was issued
        """
        pass

    @abstractmethod
    async def increment_attempts(self, request_id: OtpRequestId) -> int:
        """Atomically add one verification attempt.

        Returns:
            The attempt count after the increment
        """
        pass

    @abstractmethod
    async def mark_used(self, request_id: OtpRequestId) -> bool:
        """Conditionally flip ``is_used`` from false to true.

        Returns:
            True if this call consumed the code, False if it was already used
        """
        pass


class OtpRateLimitRepository(ABC):
    """Repository for per-identifier send throttles."""

    @abstractmethod
    async def find_by_identifier(self, identifier: str) -> Optional[OtpRateLimit]:
        """Find the throttle state for an identifier."""
        pass

    @abstractmethod
    async def consume(
        self,
        identifier: str,
        now: datetime,
        max_requests: int,
        window: timedelta,
    ) -> bool:
        """Atomically apply ``OtpRateLimit.consume`` for one identifier.

        Creates the throttle row on first use. Concurrent calls for the same
        identifier are serialized.

        Returns:
            True if the send is allowed
        """
        pass
