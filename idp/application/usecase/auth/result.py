"""Uniform results returned by the authentication use cases.

Authentication failures are reported in the result, never raised, so every
caller handles success and failure the same way.
"""

from datetime import datetime

import logfire
from pydantic import BaseModel

from idp.domain.error import DomainError
from idp.domain.model import ExternalLogin, User
from idp.domain.value import ErrorKind


class UserInfo(BaseModel):
    """Public view of a user."""

    user_id: int
    email: str | None
    phone_number: str | None
    is_email_verified: bool
    is_phone_verified: bool
    created_at: datetime
    last_login_at: datetime | None

    @classmethod
    def from_user(cls, user: User) -> "UserInfo":
        return cls(
            user_id=user.id,
            email=user.email,
            phone_number=user.phone_number,
            is_email_verified=user.is_email_verified,
            is_phone_verified=user.is_phone_verified,
            created_at=user.created_at,
            last_login_at=user.last_login_at,
        )


class ExternalLoginInfo(BaseModel):
    """Public view of a linked provider identity."""

    provider: str
    provider_user_id: str
    provider_email: str | None
    provider_display_name: str | None
    created_at: datetime
    last_used_at: datetime | None

    @classmethod
    def from_login(cls, login: ExternalLogin) -> "ExternalLoginInfo":
        return cls(
            provider=login.provider,
            provider_user_id=login.provider_user_id,
            provider_email=login.provider_email,
            provider_display_name=login.provider_display_name,
            created_at=login.created_at,
            last_used_at=login.last_used_at,
        )


def _log_failure(error: DomainError) -> None:
    if error.kind == ErrorKind.MISCONFIGURED:
        logfire.error("Auth operation misconfigured", error=error.message)
    else:
        logfire.info("Auth operation failed", kind=error.kind.value)


class AuthResult(BaseModel):
    """Outcome of an operation that may authenticate a user."""

    success: bool
    message: str
    token: str | None = None
    kind: ErrorKind | None = None
    user: UserInfo | None = None
    is_new_user: bool = False

    @classmethod
    def ok(
        cls,
        message: str,
        user: User | None = None,
        token: str | None = None,
        is_new_user: bool = False,
    ) -> "AuthResult":
        return cls(
            success=True,
            message=message,
            token=token,
            user=UserInfo.from_user(user) if user else None,
            is_new_user=is_new_user,
        )

    @classmethod
    def failed(cls, error: DomainError) -> "AuthResult":
        _log_failure(error)
        return cls(success=False, message=error.message, kind=error.kind)


class OtpSendResult(BaseModel):
    """Outcome of sending a one-time code."""

    success: bool
    message: str
    kind: ErrorKind | None = None

    @classmethod
    def failed(cls, error: DomainError) -> "OtpSendResult":
        _log_failure(error)
        return cls(success=False, message=error.message, kind=error.kind)


class TokenValidationResult(BaseModel):
    """Outcome of validating a bearer token."""

    valid: bool
    message: str
    user_id: int | None = None
    email: str | None = None
    phone_number: str | None = None
