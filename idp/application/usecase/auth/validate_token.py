"""Validate token use case."""

from pydantic import BaseModel

from idp.application.usecase.base import BaseUseCase
from idp.domain.error import MisconfiguredError
from idp.domain.service import JWTService

from .result import TokenValidationResult


class ValidateTokenRequest(BaseModel):
    """Token presented by a site."""

    token: str


class ValidateTokenUseCase(BaseUseCase[ValidateTokenRequest, TokenValidationResult]):
    """Check a bearer token and return its claims."""

    def __init__(self, jwt_service: JWTService) -> None:
        self.jwt_service = jwt_service

    async def execute(self, request: ValidateTokenRequest) -> TokenValidationResult:
        try:
            result = self.jwt_service.validate(request.token)
        except MisconfiguredError as e:
            return TokenValidationResult(valid=False, message=e.message)

        if not result.valid:
            return TokenValidationResult(valid=False, message="Invalid token.")

        return TokenValidationResult(
            valid=True,
            message="Token is valid.",
            user_id=result.user_id,
            email=result.email,
            phone_number=result.phone_number,
        )
