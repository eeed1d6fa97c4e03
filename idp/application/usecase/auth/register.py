"""Register use case."""

import logfire
from pydantic import BaseModel

from idp.application.usecase.base import BaseUseCase
from idp.domain.error import DomainError
from idp.domain.service import IdentityService, JWTService

from .result import AuthResult


class RegisterRequest(BaseModel):
    """Email and password registration."""

    email: str
    password: str
    first_name: str | None = None
    last_name: str | None = None


class RegisterUseCase(BaseUseCase[RegisterRequest, AuthResult]):
    """Create an account with email and password and sign it in."""

    def __init__(
        self, identity_service: IdentityService, jwt_service: JWTService
    ) -> None:
        self.identity_service = identity_service
        self.jwt_service = jwt_service

    async def execute(self, request: RegisterRequest) -> AuthResult:
        with logfire.span("register"):
            try:
                user = await self.identity_service.register(
                    request.email, request.password
                )
                token = self.jwt_service.issue(user)
            except DomainError as e:
                return AuthResult.failed(e)

            return AuthResult.ok(
                "Registration successful.", user=user, token=token, is_new_user=True
            )
