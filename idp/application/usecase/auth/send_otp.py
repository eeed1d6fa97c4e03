"""Send OTP use case."""

from pydantic import BaseModel

from idp.application.usecase.base import BaseUseCase
from idp.domain.error import DomainError
from idp.domain.service import OtpService

from .result import OtpSendResult


class SendOtpRequest(BaseModel):
    """Email address or phone number to send a code to."""

    identifier: str


class SendOtpUseCase(BaseUseCase[SendOtpRequest, OtpSendResult]):
    """Issue a one-time code."""

    def __init__(self, otp_service: OtpService) -> None:
        self.otp_service = otp_service

    async def execute(self, request: SendOtpRequest) -> OtpSendResult:
        try:
            identifier = await self.otp_service.send(request.identifier)
        except DomainError as e:
            return OtpSendResult.failed(e)

        channel = "email" if identifier.is_email else "phone"
        return OtpSendResult(
            success=True, message=f"Verification code sent to your {channel}."
        )
