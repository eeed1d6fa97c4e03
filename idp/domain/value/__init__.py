"""Domain value objects for the identity provider."""

from idp.domain.value.identifiers import (
    ApiKeyId,
    ExternalLoginId,
    OtpRequestId,
    UserId,
)
from idp.domain.value.types import (
    ApiScope,
    EmailAddress,
    ErrorKind,
    Identifier,
    IdentifierKind,
    PartnerKey,
    PhoneNumber,
    ProviderName,
    TokenValidation,
)

__all__ = [
    # Identifiers
    "UserId",
    "ExternalLoginId",
    "OtpRequestId",
    "ApiKeyId",
    # Types
    "ApiScope",
    "EmailAddress",
    "ErrorKind",
    "Identifier",
    "IdentifierKind",
    "PartnerKey",
    "PhoneNumber",
    "ProviderName",
    "TokenValidation",
]
