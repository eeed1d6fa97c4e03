"""OTP transports.

Codes are handed to an HTTP relay that owns the SMS and email providers.
"""

import httpx
import logfire

from idp.adapter.error import DeliveryError
from idp.config import NotificationSettings
from idp.domain.service import OtpTransport
from idp.domain.value import Identifier


class WebhookOtpTransport(OtpTransport):
    """Posts each code to the notification relay."""

    def __init__(self, settings: NotificationSettings) -> None:
        """Initialize webhook transport.

        Args:
            settings: Relay URL, bearer token and timeout
        """
        self.relay_url = settings.relay_url
        self.relay_token = settings.relay_token
        self.timeout = settings.timeout_seconds

    def _message(self, code: str) -> str:
        return f"Your verification code is {code}. It expires shortly."

    async def deliver(self, identifier: Identifier, code: str) -> bool:
        """Send the code through the relay.

        Args:
            identifier: Email or phone target
            code: The code to send

        Returns:
            True if the relay accepted the message

        Raises:
            DeliveryError: If the relay could not be reached
        """
        payload = {
            "channel": "email" if identifier.is_email else "sms",
            "to": identifier.value,
            "code": code,
            "message": self._message(code),
        }
        headers = {"Content-Type": "application/json"}
        if self.relay_token:
            headers["Authorization"] = f"Bearer {self.relay_token}"

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    self.relay_url,
                    json=payload,
                    headers=headers,
                    timeout=self.timeout,
                )
        except httpx.HTTPError as e:
            logfire.error("Notification relay HTTP error", error=str(e))
            raise DeliveryError(f"HTTP error during delivery: {e}")

        if response.status_code >= 300:
            logfire.error(
                "Notification relay rejected message",
                status_code=response.status_code,
                channel=payload["channel"],
            )
            return False

        return True


class MockOtpTransport(OtpTransport):
    """Records codes instead of sending them.

    Tests read ``last_code`` to complete OTP flows. Set ``fail`` to simulate
    a carrier outage.
    """

    def __init__(self) -> None:
        self.deliveries: list[tuple[Identifier, str]] = []
        self.fail = False

    async def deliver(self, identifier: Identifier, code: str) -> bool:
        if self.fail:
            return False
        self.deliveries.append((identifier, code))
        return True

    def last_code(self, value: str) -> str | None:
        """Most recent code delivered to ``value``."""
        for identifier, code in reversed(self.deliveries):
            if identifier.value == value:
                return code
        return None
