"""Domain model entities for the identity provider."""

from idp.domain.model.api_key import ApiKey
from idp.domain.model.external_login import ExternalLogin
from idp.domain.model.otp import OtpRateLimit, OtpRequest
from idp.domain.model.user import User

__all__ = [
    "User",
    "ExternalLogin",
    "OtpRequest",
    "OtpRateLimit",
    "ApiKey",
]
