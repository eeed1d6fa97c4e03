"""Link phone use case."""

from pydantic import BaseModel

from idp.application.usecase.base import BaseUseCase
from idp.domain.error import DomainError
from idp.domain.service import IdentityService, JWTService
from idp.domain.value import UserId

from .result import AuthResult


class LinkPhoneRequest(BaseModel):
    """Attach a phone number to the signed-in user."""

    user_id: int
    phone_number: str
    code: str


class LinkPhoneUseCase(BaseUseCase[LinkPhoneRequest, AuthResult]):
    """Verify an OTP sent to a phone and attach it.

    A fresh token is issued because the phone claim changed.
    """

    def __init__(
        self, identity_service: IdentityService, jwt_service: JWTService
    ) -> None:
        self.identity_service = identity_service
        self.jwt_service = jwt_service

    async def execute(self, request: LinkPhoneRequest) -> AuthResult:
        try:
            user = await self.identity_service.link_phone(
                UserId(request.user_id), request.phone_number, request.code
            )
            token = self.jwt_service.issue(user)
        except DomainError as e:
            return AuthResult.failed(e)

        return AuthResult.ok("Phone number linked.", user=user, token=token)
