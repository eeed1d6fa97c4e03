"""Verify OTP use case."""

import logfire
from pydantic import BaseModel

from idp.application.usecase.base import BaseUseCase
from idp.domain.error import DomainError
from idp.domain.service import IdentityService, JWTService, OtpService

from .result import AuthResult


class VerifyOtpRequest(BaseModel):
    """Code submission. Names are accepted for sign-up forms but not stored."""

    identifier: str
    code: str
    first_name: str | None = None
    last_name: str | None = None


class VerifyOtpUseCase(BaseUseCase[VerifyOtpRequest, AuthResult]):
    """Sign in (or sign up) with a verified one-time code."""

    def __init__(
        self,
        otp_service: OtpService,
        identity_service: IdentityService,
        jwt_service: JWTService,
    ) -> None:
        self.otp_service = otp_service
        self.identity_service = identity_service
        self.jwt_service = jwt_service

    async def execute(self, request: VerifyOtpRequest) -> AuthResult:
        with logfire.span("verify_otp"):
            try:
                identifier = await self.otp_service.verify(
                    request.identifier, request.code
                )
                user, created = await self.identity_service.login_by_identifier(
                    identifier
                )
                token = self.jwt_service.issue(user)
            except DomainError as e:
                return AuthResult.failed(e)

            if created and (request.first_name or request.last_name):
                logfire.info(
                    "Profile names supplied at sign-up",
                    user_id=user.id,
                    has_first_name=bool(request.first_name),
                    has_last_name=bool(request.last_name),
                )

            return AuthResult.ok(
                "Account created." if created else "Login successful.",
                user=user,
                token=token,
                is_new_user=created,
            )
