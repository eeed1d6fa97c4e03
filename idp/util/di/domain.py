"""Domain layer DI providers."""

from dishka import Scope, provide

from idp.config import ApiKeySettings, AuthSettings, OtpSettings
from idp.domain.repository import (
    AfterCommit,
    ApiKeyRepository,
    ExternalLoginRepository,
    OtpRateLimitRepository,
    OtpRequestRepository,
    UserRepository,
)
from idp.domain.service import (
    ApiKeyCache,
    ApiKeyService,
    IdentityService,
    JWTService,
    OtpService,
    OtpTransport,
)
from idp.util.clock import Clock
from idp.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Domain services are REQUEST-scoped to align with repository/session lifecycle.
    """

    scope = Scope.REQUEST

    @provide
    def get_jwt_service(self, auth_settings: AuthSettings, clock: Clock) -> JWTService:
        """Provide JWT token domain service."""
        return JWTService(auth_settings=auth_settings, clock=clock)

    @provide
    def get_otp_service(
        self,
        otp_request_repository: OtpRequestRepository,
        otp_rate_limit_repository: OtpRateLimitRepository,
        user_repository: UserRepository,
        transport: OtpTransport,
        otp_settings: OtpSettings,
        clock: Clock,
    ) -> OtpService:
        """Provide one-time code domain service."""
        return OtpService(
            otp_request_repository=otp_request_repository,
            otp_rate_limit_repository=otp_rate_limit_repository,
            user_repository=user_repository,
            transport=transport,
            otp_settings=otp_settings,
            clock=clock,
        )

    @provide
    def get_identity_service(
        self,
        user_repository: UserRepository,
        external_login_repository: ExternalLoginRepository,
        otp_service: OtpService,
        auth_settings: AuthSettings,
        clock: Clock,
    ) -> IdentityService:
        """Provide identity linking domain service."""
        return IdentityService(
            user_repository=user_repository,
            external_login_repository=external_login_repository,
            otp_service=otp_service,
            auth_settings=auth_settings,
            clock=clock,
        )

    @provide
    def get_api_key_service(
        self,
        api_key_repository: ApiKeyRepository,
        cache: ApiKeyCache,
        api_key_settings: ApiKeySettings,
        clock: Clock,
        after_commit: AfterCommit,
    ) -> ApiKeyService:
        """Provide API key domain service."""
        return ApiKeyService(
            api_key_repository=api_key_repository,
            cache=cache,
            api_key_settings=api_key_settings,
            clock=clock,
            after_commit=after_commit,
        )
