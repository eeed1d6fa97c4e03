"""PostgreSQL repository implementations."""

from idp.persistence.repository.api_key import PostgresApiKeyRepository
from idp.persistence.repository.external_login import PostgresExternalLoginRepository
from idp.persistence.repository.otp import (
    PostgresOtpRateLimitRepository,
    PostgresOtpRequestRepository,
)
from idp.persistence.repository.user import PostgresUserRepository

__all__ = [
    "PostgresApiKeyRepository",
    "PostgresExternalLoginRepository",
    "PostgresOtpRateLimitRepository",
    "PostgresOtpRequestRepository",
    "PostgresUserRepository",
]
