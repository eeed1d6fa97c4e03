"""Domain services."""

from .api_key_service import ApiKeyCache, ApiKeyService, CachedApiKey
from .base import Service
from .identity_service import IdentityService
from .jwt_service import JWTService
from .otp_service import OtpService, OtpTransport

__all__ = [
    "ApiKeyCache",
    "ApiKeyService",
    "CachedApiKey",
    "IdentityService",
    "JWTService",
    "OtpService",
    "OtpTransport",
    "Service",
]
