"""One-time code entities."""

import secrets
from datetime import datetime, timedelta
from typing import Optional

from pydantic import Field

from idp.domain.model.common import DomainModel
from idp.domain.value import OtpRequestId, UserId


class OtpRequest(DomainModel):
    """A single issued code.

    Codes are single-use: once ``is_used`` is set, or ``expires_at`` has
    passed, verification always fails. Expired rows are left in place.
    """

    id: OtpRequestId
    identifier: str  # Normalized email or E.164 phone
    code: str  # 6 digits
    user_id: Optional[UserId] = None  # Account matched when the code was sent
    created_at: datetime
    expires_at: datetime
    is_used: bool = False
    attempt_count: int = Field(default=0, ge=0)

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def matches(self, code: str) -> bool:
        """Constant-time comparison against the submitted code."""
        return secrets.compare_digest(self.code.encode(), code.strip().encode())


class OtpRateLimit(DomainModel):
    """Per-identifier send throttle.

    Once blocked, every send is refused until ``blocked_until`` passes,
    whatever the count says.
    """

    identifier: str
    request_count: int = Field(default=0, ge=0)
    window_start: datetime
    blocked_until: Optional[datetime] = None

    def is_blocked(self, now: datetime) -> bool:
        return self.blocked_until is not None and now < self.blocked_until

    def consume(
        self, now: datetime, max_requests: int, window: timedelta
    ) -> tuple["OtpRateLimit", bool]:
        """Try to spend one send from the current window.

        Args:
            now: Current time
            max_requests: Sends allowed per window
            window: Window length

        Returns:
            The next state and whether the send is allowed. A refused send
            returns the state unchanged.
        """
        if self.is_blocked(now):
            return self, False

        state = self
        if now >= self.window_start + window:
            # Window rolled over; start a fresh one
            state = self.model_copy(
                update={"request_count": 0, "window_start": now, "blocked_until": None}
            )

        if state.request_count >= max_requests:
            return state, False

        count = state.request_count + 1
        update: dict = {"request_count": count}
        if count >= max_requests:
            update["blocked_until"] = state.window_start + window
        return state.model_copy(update=update), True
