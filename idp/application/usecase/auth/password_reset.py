"""Password reset use cases.

Reset is two steps: send a code to the account's email or phone, then
submit the code with the new password.
"""

import logfire
from pydantic import BaseModel

from idp.application.usecase.base import BaseUseCase
from idp.domain.error import DomainError
from idp.domain.service import IdentityService, OtpService

from .result import AuthResult, OtpSendResult

RESET_SENT_MESSAGE = "If an account exists, a reset code has been sent."


class SendPasswordResetRequest(BaseModel):
    """Email address or phone number of the account."""

    identifier: str


class SendPasswordResetUseCase(BaseUseCase[SendPasswordResetRequest, OtpSendResult]):
    """Send a reset code without revealing whether the account exists.

    A code is issued for unknown identifiers too, so timing and throttling
    look the same either way.
    """

    def __init__(self, otp_service: OtpService) -> None:
        self.otp_service = otp_service

    async def execute(self, request: SendPasswordResetRequest) -> OtpSendResult:
        with logfire.span("send_password_reset"):
            try:
                await self.otp_service.send(request.identifier)
            except DomainError as e:
                return OtpSendResult.failed(e)

            return OtpSendResult(success=True, message=RESET_SENT_MESSAGE)


class ResetPasswordRequest(BaseModel):
    identifier: str
    code: str
    new_password: str


class ResetPasswordUseCase(BaseUseCase[ResetPasswordRequest, AuthResult]):
    """Set a new password with a verified reset code."""

    def __init__(self, identity_service: IdentityService) -> None:
        self.identity_service = identity_service

    async def execute(self, request: ResetPasswordRequest) -> AuthResult:
        with logfire.span("reset_password"):
            try:
                user = await self.identity_service.reset_password(
                    request.identifier, request.code, request.new_password
                )
            except DomainError as e:
                return AuthResult.failed(e)

            return AuthResult.ok("Password reset successful.", user=user)
