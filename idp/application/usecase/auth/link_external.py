"""Link external login use case."""

from pydantic import BaseModel

from idp.application.usecase.base import BaseUseCase
from idp.domain.error import DomainError
from idp.domain.service import IdentityService
from idp.domain.value import UserId

from .result import AuthResult


class LinkExternalRequest(BaseModel):
    """Bind a provider identity to the signed-in user."""

    user_id: int
    provider: str
    provider_user_id: str
    provider_email: str | None = None
    provider_display_name: str | None = None


class LinkExternalUseCase(BaseUseCase[LinkExternalRequest, AuthResult]):
    """Link a Google/Apple/... identity to an existing account."""

    def __init__(self, identity_service: IdentityService) -> None:
        self.identity_service = identity_service

    async def execute(self, request: LinkExternalRequest) -> AuthResult:
        try:
            login = await self.identity_service.link_external(
                UserId(request.user_id),
                request.provider,
                request.provider_user_id,
                request.provider_email,
                request.provider_display_name,
            )
            user = await self.identity_service.get_user(login.user_id)
        except DomainError as e:
            return AuthResult.failed(e)

        return AuthResult.ok(f"{login.provider} account linked.", user=user)
