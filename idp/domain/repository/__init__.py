"""Repository interfaces for the identity domain.

Repository interfaces are defined in the domain layer (dependency inversion).
Implementations live in the persistence layer.
"""

from idp.domain.repository.api_key import ApiKeyRepository
from idp.domain.repository.external_login import ExternalLoginRepository
from idp.domain.repository.otp import OtpRateLimitRepository, OtpRequestRepository
from idp.domain.repository.transaction import AfterCommit
from idp.domain.repository.user import UserRepository

__all__ = [
    "AfterCommit",
    "UserRepository",
    "ExternalLoginRepository",
    "OtpRequestRepository",
    "OtpRateLimitRepository",
    "ApiKeyRepository",
]
