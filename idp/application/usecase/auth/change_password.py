"""Change password use case."""

from pydantic import BaseModel

from idp.application.usecase.base import BaseUseCase
from idp.domain.error import DomainError
from idp.domain.service import IdentityService
from idp.domain.value import UserId

from .result import AuthResult


class ChangePasswordRequest(BaseModel):
    user_id: int
    current_password: str
    new_password: str


class ChangePasswordUseCase(BaseUseCase[ChangePasswordRequest, AuthResult]):
    """Replace a password after re-checking the current one."""

    def __init__(self, identity_service: IdentityService) -> None:
        self.identity_service = identity_service

    async def execute(self, request: ChangePasswordRequest) -> AuthResult:
        try:
            user = await self.identity_service.change_password(
                UserId(request.user_id),
                request.current_password,
                request.new_password,
            )
        except DomainError as e:
            return AuthResult.failed(e)

        return AuthResult.ok("Password changed.", user=user)
