"""External login use case."""

import logfire
from pydantic import BaseModel

from idp.application.usecase.base import BaseUseCase
from idp.config import AuthSettings
from idp.domain.error import DomainError
from idp.domain.service import IdentityService, JWTService

from .result import AuthResult
from .shared_secret import check_shared_secret


class ExternalLoginRequest(BaseModel):
    """Provider identity asserted by a trusted site backend.

    The site has already completed the provider's OAuth flow; this service
    trusts the assertion because it carries the shared secret.
    """

    provider: str
    provider_user_id: str
    provider_email: str | None = None
    provider_display_name: str | None = None
    api_secret_key: str


class ExternalLoginUseCase(BaseUseCase[ExternalLoginRequest, AuthResult]):
    """Sign in with a provider identity, creating the account if new."""

    def __init__(
        self,
        identity_service: IdentityService,
        jwt_service: JWTService,
        auth_settings: AuthSettings,
    ) -> None:
        self.identity_service = identity_service
        self.jwt_service = jwt_service
        self.auth_settings = auth_settings

    async def execute(self, request: ExternalLoginRequest) -> AuthResult:
        with logfire.span("external_login", provider=request.provider):
            try:
                check_shared_secret(self.auth_settings, request.api_secret_key)
                user, created = await self.identity_service.external_login(
                    request.provider,
                    request.provider_user_id,
                    request.provider_email,
                    request.provider_display_name,
                )
                token = self.jwt_service.issue(user)
            except DomainError as e:
                return AuthResult.failed(e)

            return AuthResult.ok(
                "Account created." if created else "Login successful.",
                user=user,
                token=token,
                is_new_user=created,
            )
