"""Notification infrastructure providers."""

from dishka import Scope, provide

from idp.adapter.notification import WebhookOtpTransport
from idp.config import NotificationSettings
from idp.domain.service import OtpTransport
from idp.util.di.base import ProviderBase


class NotificationProvider(ProviderBase):
    """OTP delivery component base."""

    __mock_component__ = "notification"


class ProdNotificationProvider(NotificationProvider):
    """Production notification provider posting to the relay."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    def get_otp_transport(self, settings: NotificationSettings) -> OtpTransport:
        """Provide relay-backed OTP transport.

        Raises:
            ValueError: If the relay URL is not configured
        """
        if not settings.relay_url:
            raise ValueError("Notification relay URL must be configured")
        return WebhookOtpTransport(settings)
