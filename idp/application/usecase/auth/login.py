"""Password login use case."""

import logfire
from pydantic import BaseModel

from idp.application.usecase.base import BaseUseCase
from idp.domain.error import DomainError
from idp.domain.service import IdentityService, JWTService

from .result import AuthResult


class LoginRequest(BaseModel):
    """Email and password login."""

    email: str
    password: str


class LoginUseCase(BaseUseCase[LoginRequest, AuthResult]):
    """Authenticate with email and password.

    Every failure reads "Invalid email or password." so callers cannot
    tell which accounts exist.
    """

    def __init__(
        self, identity_service: IdentityService, jwt_service: JWTService
    ) -> None:
        self.identity_service = identity_service
        self.jwt_service = jwt_service

    async def execute(self, request: LoginRequest) -> AuthResult:
        with logfire.span("login"):
            try:
                user = await self.identity_service.authenticate(
                    request.email, request.password
                )
                token = self.jwt_service.issue(user)
            except DomainError as e:
                return AuthResult.failed(e)

            return AuthResult.ok("Login successful.", user=user, token=token)
