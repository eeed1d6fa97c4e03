"""Domain value objects for the identity provider.

Value objects are immutable and defined by their values, not identity.
They encapsulate normalization and validation rules.
"""

import re
import string
from enum import Enum

from pydantic import field_validator

from idp.domain.value.common import RootValueObject, ValueObject
from idp.domain.value.identifiers import UserId


class ErrorKind(str, Enum):
    """Reason an authentication operation failed.

    Every domain error carries one of these so results can be reported
    uniformly and mapped to transport status codes.
    """

    DUPLICATE_CREDENTIAL = "duplicate_credential"
    INVALID_CREDENTIALS = "invalid_credentials"
    RATE_LIMITED = "rate_limited"
    CODE_EXPIRED = "code_expired"
    CODE_ALREADY_USED = "code_already_used"
    CODE_MISMATCH = "code_mismatch"
    TOO_MANY_ATTEMPTS = "too_many_attempts"
    LAST_CREDENTIAL = "last_credential"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    MISCONFIGURED = "misconfigured"
    INVALID_INPUT = "invalid_input"
    DELIVERY_FAILED = "delivery_failed"


class IdentifierKind(str, Enum):
    """Channel an identifier belongs to."""

    EMAIL = "email"
    PHONE = "phone"


class ApiScope(str, Enum):
    """Permissions grantable to a partner API key."""

    AUTH_VALIDATE = "auth:validate"
    AUTH_SYNC = "auth:sync"
    USERS_READ = "users:read"
    USERS_WRITE = "users:write"
    ASSETS_READ = "assets:read"
    ASSETS_WRITE = "assets:write"
    SITES_READ = "sites:read"
    PUSH_SEND = "push:send"
    ADMIN = "admin"  # Grants every other scope

    @classmethod
    def values(cls) -> set[str]:
        """All known scope strings."""
        return {scope.value for scope in cls}


class EmailAddress(RootValueObject[str]):
    """Case-normalized email address."""

    @field_validator("root")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Trim, lowercase and sanity-check the address."""
        v = v.strip().lower()
        if len(v) > 254 or not re.match(r"^[^@\s]+@[^@\s]+\.[^@\s]+$", v):
            raise ValueError("Invalid email address")
        return v


class PhoneNumber(RootValueObject[str]):
    """Phone number in E.164 form.

    Formatting characters are dropped and a leading ``+`` is added when
    missing, so ``(555) 123-4567`` style input from the same country code
    collapses to one canonical value.
    """

    @field_validator("root")
    @classmethod
    def normalize_phone(cls, v: str) -> str:
        """Keep digits and '+', then require E.164 shape."""
        cleaned = "".join(c for c in v if c in string.digits or c == "+")
        if not cleaned.startswith("+"):
            cleaned = f"+{cleaned}"
        if not re.match(r"^\+[1-9]\d{7,14}$", cleaned):
            raise ValueError("Invalid phone number")
        return cleaned


class Identifier(ValueObject):
    """Normalized OTP target: an email address or a phone number."""

    kind: IdentifierKind
    value: str

    @classmethod
    def parse(cls, raw: str) -> "Identifier":
        """Classify and normalize a raw identifier.

        Anything containing ``@`` is treated as an email address.

        Raises:
            ValueError: If the identifier is neither a valid email nor phone
        """
        if "@" in raw:
            return cls(kind=IdentifierKind.EMAIL, value=EmailAddress(raw).root)
        return cls(kind=IdentifierKind.PHONE, value=PhoneNumber(raw).root)

    @property
    def is_email(self) -> bool:
        return self.kind == IdentifierKind.EMAIL

    def __str__(self) -> str:
        return self.value


class ProviderName(RootValueObject[str]):
    """External identity provider name, lowercased ('google', 'apple')."""

    @field_validator("root")
    @classmethod
    def normalize_provider(cls, v: str) -> str:
        v = v.strip().lower()
        if len(v) < 1 or len(v) > 50:
            raise ValueError("Provider must be 1-50 characters")
        return v


class PartnerKey(RootValueObject[str]):
    """Partner slug owning an API key.

    Lowercase alphanumeric with hyphens, 1-50 characters.
    """

    @field_validator("root")
    @classmethod
    def validate_partner_key(cls, v: str) -> str:
        if not re.match(r"^[a-z0-9-]{1,50}$", v):
            raise ValueError(
                "Partner key must be 1-50 characters of lowercase letters, digits and hyphens"
            )
        return v


class TokenValidation(ValueObject):
    """Outcome of validating a bearer token.

    Invalid tokens carry no detail about which check failed.
    """

    valid: bool
    user_id: UserId | None = None
    email: str | None = None
    phone_number: str | None = None
