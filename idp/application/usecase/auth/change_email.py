"""Change email use cases.

Two steps: send a code to the new address, then submit it.
"""

import logfire
from pydantic import BaseModel

from idp.application.usecase.base import BaseUseCase
from idp.domain.error import DomainError
from idp.domain.service import IdentityService, JWTService
from idp.domain.value import UserId

from .result import AuthResult, OtpSendResult


class RequestEmailChangeRequest(BaseModel):
    user_id: int
    new_email: str


class RequestEmailChangeUseCase(
    BaseUseCase[RequestEmailChangeRequest, OtpSendResult]
):
    """Send a verification code to the address the user is moving to."""

    def __init__(self, identity_service: IdentityService) -> None:
        self.identity_service = identity_service

    async def execute(self, request: RequestEmailChangeRequest) -> OtpSendResult:
        with logfire.span("request_email_change", user_id=request.user_id):
            try:
                await self.identity_service.request_email_change(
                    UserId(request.user_id), request.new_email
                )
            except DomainError as e:
                return OtpSendResult.failed(e)

            return OtpSendResult(
                success=True, message="Verification code sent to your new email."
            )


class ChangeEmailRequest(BaseModel):
    user_id: int
    new_email: str
    code: str


class ChangeEmailUseCase(BaseUseCase[ChangeEmailRequest, AuthResult]):
    """Switch to the new email once its code is verified.

    A fresh token is issued because the email claim changed.
    """

    def __init__(
        self, identity_service: IdentityService, jwt_service: JWTService
    ) -> None:
        self.identity_service = identity_service
        self.jwt_service = jwt_service

    async def execute(self, request: ChangeEmailRequest) -> AuthResult:
        with logfire.span("change_email", user_id=request.user_id):
            try:
                user = await self.identity_service.change_email(
                    UserId(request.user_id), request.new_email, request.code
                )
                token = self.jwt_service.issue(user)
            except DomainError as e:
                return AuthResult.failed(e)

            return AuthResult.ok("Email updated successfully.", user=user, token=token)
