"""In-memory repository implementations for testing."""

from .api_key import InMemoryApiKeyRepository
from .external_login import InMemoryExternalLoginRepository
from .otp import InMemoryOtpRateLimitRepository, InMemoryOtpRequestRepository
from .user import InMemoryUserRepository

__all__ = [
    "InMemoryApiKeyRepository",
    "InMemoryExternalLoginRepository",
    "InMemoryOtpRateLimitRepository",
    "InMemoryOtpRequestRepository",
    "InMemoryUserRepository",
]
