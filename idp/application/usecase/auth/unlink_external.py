"""Unlink external login use case."""

from pydantic import BaseModel

from idp.application.usecase.base import BaseUseCase
from idp.domain.error import DomainError
from idp.domain.service import IdentityService
from idp.domain.value import UserId

from .result import AuthResult


class UnlinkExternalRequest(BaseModel):
    """Remove one provider identity from the signed-in user."""

    user_id: int
    provider: str


class UnlinkExternalUseCase(BaseUseCase[UnlinkExternalRequest, AuthResult]):
    """Unlink a provider, refusing to remove the last login method."""

    def __init__(self, identity_service: IdentityService) -> None:
        self.identity_service = identity_service

    async def execute(self, request: UnlinkExternalRequest) -> AuthResult:
        try:
            await self.identity_service.unlink_external(
                UserId(request.user_id), request.provider
            )
        except DomainError as e:
            return AuthResult.failed(e)

        return AuthResult.ok(f"{request.provider.strip().lower()} account unlinked.")
