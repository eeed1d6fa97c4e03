"""Link email use case."""

from pydantic import BaseModel

from idp.application.usecase.base import BaseUseCase
from idp.domain.error import DomainError
from idp.domain.service import IdentityService, JWTService
from idp.domain.value import UserId

from .result import AuthResult


class LinkEmailRequest(BaseModel):
    """Attach email and password to the signed-in user."""

    user_id: int
    email: str
    password: str


class LinkEmailUseCase(BaseUseCase[LinkEmailRequest, AuthResult]):
    """Give a phone-only or provider-only account an email login."""

    def __init__(
        self, identity_service: IdentityService, jwt_service: JWTService
    ) -> None:
        self.identity_service = identity_service
        self.jwt_service = jwt_service

    async def execute(self, request: LinkEmailRequest) -> AuthResult:
        try:
            user = await self.identity_service.link_email(
                UserId(request.user_id), request.email, request.password
            )
            token = self.jwt_service.issue(user)
        except DomainError as e:
            return AuthResult.failed(e)

        return AuthResult.ok("Email linked.", user=user, token=token)
