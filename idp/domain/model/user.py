"""User aggregate root.

A user owns any combination of credentials: email + password, a phone
number reachable by OTP, and external provider identities.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import Field

from idp.domain.model.common import DomainModel
from idp.domain.value import UserId


class User(DomainModel):
    """User aggregate root.

    Invariant (enforced by ``IdentityService``): after every completed
    operation the user holds at least one of email + password, a phone
    number, or one external login.
    """

    id: UserId
    email: Optional[str] = None  # Lowercased, unique
    password_hash: Optional[str] = None
    phone_number: Optional[str] = None  # E.164, unique
    is_email_verified: bool = False
    is_phone_verified: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None

    @property
    def has_password_credential(self) -> bool:
        """Email and password together form one credential."""
        return bool(self.email and self.password_hash)

    @property
    def has_phone_credential(self) -> bool:
        return self.phone_number is not None

    def login_method_count(self, external_login_count: int) -> int:
        """Number of independent ways this user can authenticate."""
        return (
            external_login_count
            + (1 if self.has_password_credential else 0)
            + (1 if self.has_phone_credential else 0)
        )
