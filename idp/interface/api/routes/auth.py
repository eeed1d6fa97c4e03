"""Authentication routes.

Authentication failures come back as a result body with ``success: false``
and a status code derived from the failure kind.
"""

import logging
from typing import Annotated

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from idp.application.usecase.auth import (
    ChangeEmailUseCase,
    ChangePasswordUseCase,
    ExternalLoginUseCase,
    ForceAuthUseCase,
    GetCurrentUserUseCase,
    LinkEmailUseCase,
    LinkExternalUseCase,
    LinkPhoneUseCase,
    ListExternalLoginsUseCase,
    LoginUseCase,
    RegisterUseCase,
    RequestEmailChangeUseCase,
    ResetPasswordUseCase,
    SendOtpUseCase,
    SendPasswordResetUseCase,
    UnlinkExternalUseCase,
    ValidateTokenUseCase,
    VerifyOtpUseCase,
)
from idp.application.usecase.auth.change_email import (
    ChangeEmailRequest,
    RequestEmailChangeRequest,
)
from idp.application.usecase.auth.change_password import ChangePasswordRequest
from idp.application.usecase.auth.external_login import ExternalLoginRequest
from idp.application.usecase.auth.force_auth import ForceAuthRequest
from idp.application.usecase.auth.get_current_user import (
    GetCurrentUserRequest,
    GetCurrentUserResponse,
)
from idp.application.usecase.auth.link_email import LinkEmailRequest
from idp.application.usecase.auth.link_external import LinkExternalRequest
from idp.application.usecase.auth.link_phone import LinkPhoneRequest
from idp.application.usecase.auth.list_external_logins import (
    ListExternalLoginsRequest,
    ListExternalLoginsResponse,
)
from idp.application.usecase.auth.login import LoginRequest
from idp.application.usecase.auth.password_reset import (
    ResetPasswordRequest,
    SendPasswordResetRequest,
)
from idp.application.usecase.auth.register import RegisterRequest
from idp.application.usecase.auth.result import (
    AuthResult,
    OtpSendResult,
    TokenValidationResult,
)
from idp.application.usecase.auth.send_otp import SendOtpRequest
from idp.application.usecase.auth.unlink_external import UnlinkExternalRequest
from idp.application.usecase.auth.validate_token import ValidateTokenRequest
from idp.application.usecase.auth.verify_otp import VerifyOtpRequest
from idp.domain.value import UserId
from idp.interface.api.dependencies import require_user
from idp.interface.error import http_status_for

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"], route_class=DishkaRoute)

CurrentUser = Annotated[UserId, Depends(require_user)]


class LinkPhoneBody(BaseModel):
    phone_number: str
    code: str


class LinkEmailBody(BaseModel):
    email: str
    password: str


class RequestEmailChangeBody(BaseModel):
    new_email: str


class ChangeEmailBody(BaseModel):
    new_email: str
    code: str


class LinkExternalBody(BaseModel):
    provider: str
    provider_user_id: str
    provider_email: str | None = None
    provider_display_name: str | None = None


class UnlinkExternalBody(BaseModel):
    provider: str


class ChangePasswordBody(BaseModel):
    current_password: str
    new_password: str


def _respond(result, response: Response):
    """Set the failure status code on a result body."""
    if not result.success:
        response.status_code = http_status_for(result.kind)
    return result


@router.post("/register", response_model=AuthResult)
async def register(
    request: RegisterRequest,
    response: Response,
    use_case: FromDishka[RegisterUseCase],
) -> AuthResult:
    """Create an account with email and password."""
    return _respond(await use_case.execute(request), response)


@router.post("/login", response_model=AuthResult)
async def login(
    request: LoginRequest,
    response: Response,
    use_case: FromDishka[LoginUseCase],
) -> AuthResult:
    """Sign in with email and password."""
    return _respond(await use_case.execute(request), response)


@router.post("/otp/send", response_model=OtpSendResult)
async def send_otp(
    request: SendOtpRequest,
    response: Response,
    use_case: FromDishka[SendOtpUseCase],
) -> OtpSendResult:
    """Send a one-time code to an email address or phone number."""
    return _respond(await use_case.execute(request), response)


@router.post("/otp/verify", response_model=AuthResult)
async def verify_otp(
    request: VerifyOtpRequest,
    response: Response,
    use_case: FromDishka[VerifyOtpUseCase],
) -> AuthResult:
    """Sign in (or sign up) with a one-time code."""
    return _respond(await use_case.execute(request), response)


@router.post("/link/phone", response_model=AuthResult)
async def link_phone(
    body: LinkPhoneBody,
    user_id: CurrentUser,
    response: Response,
    use_case: FromDishka[LinkPhoneUseCase],
) -> AuthResult:
    """Attach a phone number verified with a one-time code."""
    request = LinkPhoneRequest(user_id=user_id, **body.model_dump())
    return _respond(await use_case.execute(request), response)


@router.post("/link/email", response_model=AuthResult)
async def link_email(
    body: LinkEmailBody,
    user_id: CurrentUser,
    response: Response,
    use_case: FromDishka[LinkEmailUseCase],
) -> AuthResult:
    """Attach an email and password."""
    request = LinkEmailRequest(user_id=user_id, **body.model_dump())
    return _respond(await use_case.execute(request), response)


@router.post("/external/link", response_model=AuthResult)
async def link_external(
    body: LinkExternalBody,
    user_id: CurrentUser,
    response: Response,
    use_case: FromDishka[LinkExternalUseCase],
) -> AuthResult:
    """Link a provider identity to the signed-in account."""
    request = LinkExternalRequest(user_id=user_id, **body.model_dump())
    return _respond(await use_case.execute(request), response)


@router.post("/external/unlink", response_model=AuthResult)
async def unlink_external(
    body: UnlinkExternalBody,
    user_id: CurrentUser,
    response: Response,
    use_case: FromDishka[UnlinkExternalUseCase],
) -> AuthResult:
    """Unlink a provider identity; the last login method cannot be removed."""
    request = UnlinkExternalRequest(user_id=user_id, provider=body.provider)
    return _respond(await use_case.execute(request), response)


@router.get("/external", response_model=ListExternalLoginsResponse)
async def list_external_logins(
    user_id: CurrentUser,
    use_case: FromDishka[ListExternalLoginsUseCase],
) -> ListExternalLoginsResponse:
    """List the provider identities linked to the signed-in account."""
    return await use_case.execute(ListExternalLoginsRequest(user_id=user_id))


@router.post("/external/login", response_model=AuthResult)
async def external_login(
    request: ExternalLoginRequest,
    response: Response,
    use_case: FromDishka[ExternalLoginUseCase],
) -> AuthResult:
    """Sign in with a provider identity asserted by a trusted site backend."""
    logger.info(f"External login via {request.provider}")
    return _respond(await use_case.execute(request), response)


@router.post("/force-auth", response_model=AuthResult)
async def force_auth(
    request: ForceAuthRequest,
    response: Response,
    use_case: FromDishka[ForceAuthUseCase],
) -> AuthResult:
    """Issue a token for a user on behalf of a trusted site backend."""
    return _respond(await use_case.execute(request), response)


@router.post("/validate", response_model=TokenValidationResult)
async def validate_token(
    request: ValidateTokenRequest,
    use_case: FromDishka[ValidateTokenUseCase],
) -> TokenValidationResult:
    """Check a token and return its claims."""
    return await use_case.execute(request)


@router.get("/me", response_model=GetCurrentUserResponse)
async def get_current_user(
    user_id: CurrentUser,
    use_case: FromDishka[GetCurrentUserUseCase],
) -> GetCurrentUserResponse:
    """Get the signed-in user."""
    return await use_case.execute(GetCurrentUserRequest(user_id=user_id))


@router.post("/password/change", response_model=AuthResult)
async def change_password(
    body: ChangePasswordBody,
    user_id: CurrentUser,
    response: Response,
    use_case: FromDishka[ChangePasswordUseCase],
) -> AuthResult:
    """Change the password of the signed-in account."""
    request = ChangePasswordRequest(user_id=user_id, **body.model_dump())
    return _respond(await use_case.execute(request), response)


@router.post("/password/reset/send", response_model=OtpSendResult)
async def send_password_reset(
    request: SendPasswordResetRequest,
    response: Response,
    use_case: FromDishka[SendPasswordResetUseCase],
) -> OtpSendResult:
    """Send a reset code; the response never says whether the account exists."""
    return _respond(await use_case.execute(request), response)


@router.post("/password/reset", response_model=AuthResult)
async def reset_password(
    request: ResetPasswordRequest,
    response: Response,
    use_case: FromDishka[ResetPasswordUseCase],
) -> AuthResult:
    """Set a new password with a reset code."""
    return _respond(await use_case.execute(request), response)


@router.post("/email/change/request", response_model=OtpSendResult)
async def request_email_change(
    body: RequestEmailChangeBody,
    user_id: CurrentUser,
    response: Response,
    use_case: FromDishka[RequestEmailChangeUseCase],
) -> OtpSendResult:
    """Send a code to the address the signed-in user is moving to."""
    request = RequestEmailChangeRequest(user_id=user_id, **body.model_dump())
    return _respond(await use_case.execute(request), response)


@router.post("/email/change", response_model=AuthResult)
async def change_email(
    body: ChangeEmailBody,
    user_id: CurrentUser,
    response: Response,
    use_case: FromDishka[ChangeEmailUseCase],
) -> AuthResult:
    """Switch to a new email verified with its code; returns a fresh token."""
    request = ChangeEmailRequest(user_id=user_id, **body.model_dump())
    return _respond(await use_case.execute(request), response)
