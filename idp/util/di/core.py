"""Core DI providers (non-mockable)."""

from dishka import Scope, provide

from idp.config import (
    ApiKeySettings,
    AuthSettings,
    NotificationSettings,
    OtpSettings,
    Settings,
)
from idp.util.clock import Clock, SystemClock
from idp.util.di.base import ProviderBase


class ProdConfigProvider(ProviderBase):
    """Settings and clock.

    Settings are loaded from environment variables and the .env file.
    """

    scope = Scope.APP

    @provide
    def provide_settings(self) -> Settings:
        """Provide application settings from environment."""
        return Settings()

    @provide
    def provide_auth_settings(self, settings: Settings) -> AuthSettings:
        return settings.auth

    @provide
    def provide_otp_settings(self, settings: Settings) -> OtpSettings:
        return settings.otp

    @provide
    def provide_api_key_settings(self, settings: Settings) -> ApiKeySettings:
        return settings.api_keys

    @provide
    def provide_notification_settings(self, settings: Settings) -> NotificationSettings:
        return settings.notification

    @provide
    def provide_clock(self) -> Clock:
        return SystemClock()
