"""Authentication use cases."""

from .change_email import ChangeEmailUseCase, RequestEmailChangeUseCase
from .change_password import ChangePasswordUseCase
from .external_login import ExternalLoginUseCase
from .force_auth import ForceAuthUseCase
from .get_current_user import GetCurrentUserUseCase
from .link_email import LinkEmailUseCase
from .link_external import LinkExternalUseCase
from .link_phone import LinkPhoneUseCase
from .list_external_logins import ListExternalLoginsUseCase
from .login import LoginUseCase
from .password_reset import ResetPasswordUseCase, SendPasswordResetUseCase
from .register import RegisterUseCase
from .send_otp import SendOtpUseCase
from .unlink_external import UnlinkExternalUseCase
from .validate_token import ValidateTokenUseCase
from .verify_otp import VerifyOtpUseCase

__all__ = [
    "ChangeEmailUseCase",
    "ChangePasswordUseCase",
    "ExternalLoginUseCase",
    "ForceAuthUseCase",
    "GetCurrentUserUseCase",
    "LinkEmailUseCase",
    "LinkExternalUseCase",
    "LinkPhoneUseCase",
    "ListExternalLoginsUseCase",
    "LoginUseCase",
    "RegisterUseCase",
    "RequestEmailChangeUseCase",
    "ResetPasswordUseCase",
    "SendOtpUseCase",
    "SendPasswordResetUseCase",
    "UnlinkExternalUseCase",
    "ValidateTokenUseCase",
    "VerifyOtpUseCase",
]
