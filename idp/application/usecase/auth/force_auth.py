"""Force auth use case."""

import logfire
from pydantic import BaseModel

from idp.application.usecase.base import BaseUseCase
from idp.config import AuthSettings
from idp.domain.error import DomainError
from idp.domain.service import IdentityService, JWTService
from idp.domain.value import UserId

from .result import AuthResult
from .shared_secret import check_shared_secret


class ForceAuthRequest(BaseModel):
    """Token request for a known user from a trusted backend."""

    user_id: int
    api_secret_key: str


class ForceAuthUseCase(BaseUseCase[ForceAuthRequest, AuthResult]):
    """Issue a token for any user without their credentials.

    Guarded only by the shared secret.
    """

    def __init__(
        self,
        identity_service: IdentityService,
        jwt_service: JWTService,
        auth_settings: AuthSettings,
    ) -> None:
        self.identity_service = identity_service
        self.jwt_service = jwt_service
        self.auth_settings = auth_settings

    async def execute(self, request: ForceAuthRequest) -> AuthResult:
        with logfire.span("force_auth", user_id=request.user_id):
            try:
                check_shared_secret(self.auth_settings, request.api_secret_key)
                user = await self.identity_service.get_user(UserId(request.user_id))
                user = await self.identity_service.record_login(user)
                token = self.jwt_service.issue(user)
            except DomainError as e:
                return AuthResult.failed(e)

            logfire.warn("Token force-issued", user_id=user.id)
            return AuthResult.ok("Authentication successful.", user=user, token=token)
