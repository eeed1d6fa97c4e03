"""Mappers for converting between database rows and domain models.

Domain models are immutable pydantic models, so rows are mapped by hand
instead of through SQLAlchemy's ORM mapping.
"""

from typing import Any, Dict

from idp.domain.model import ApiKey, ExternalLogin, OtpRateLimit, OtpRequest, User
from idp.domain.value import ApiKeyId, ExternalLoginId, OtpRequestId, UserId


def row_to_user(row: Dict[str, Any]) -> User:
    """Convert database row to User domain model.

    Args:
        row: Database row as dict

    Returns:
        User domain model
    """
    return User(
        id=UserId(row["id"]),
        email=row.get("email"),
        password_hash=row.get("password_hash"),
        phone_number=row.get("phone_number"),
        is_email_verified=row["is_email_verified"],
        is_phone_verified=row["is_phone_verified"],
        created_at=row["created_at"],
        updated_at=row.get("updated_at"),
        last_login_at=row.get("last_login_at"),
    )


def user_to_dict(user: User) -> Dict[str, Any]:
    """Convert User domain model to database dict."""
    return user.model_dump()


def row_to_external_login(row: Dict[str, Any]) -> ExternalLogin:
    """Convert database row to ExternalLogin domain model."""
    return ExternalLogin(
        id=ExternalLoginId(row["id"]),
        user_id=UserId(row["user_id"]),
        provider=row["provider"],
        provider_user_id=row["provider_user_id"],
        provider_email=row.get("provider_email"),
        provider_display_name=row.get("provider_display_name"),
        created_at=row["created_at"],
        last_used_at=row.get("last_used_at"),
    )


def external_login_to_dict(login: ExternalLogin) -> Dict[str, Any]:
    """Convert ExternalLogin domain model to database dict."""
    return login.model_dump()


def row_to_otp_request(row: Dict[str, Any]) -> OtpRequest:
    """Convert database row to OtpRequest domain model."""
    return OtpRequest(
        id=OtpRequestId(row["id"]),
        identifier=row["identifier"],
        code=row["code"],
        user_id=UserId(row["user_id"]) if row.get("user_id") is not None else None,
        created_at=row["created_at"],
        expires_at=row["expires_at"],
        is_used=row["is_used"],
        attempt_count=row["attempt_count"],
    )


def otp_request_to_dict(request: OtpRequest) -> Dict[str, Any]:
    """Convert OtpRequest domain model to database dict."""
    return request.model_dump()


def row_to_otp_rate_limit(row: Dict[str, Any]) -> OtpRateLimit:
    """Convert database row to OtpRateLimit domain model."""
    return OtpRateLimit(
        identifier=row["identifier"],
        request_count=row["request_count"],
        window_start=row["window_start"],
        blocked_until=row.get("blocked_until"),
    )


def row_to_api_key(row: Dict[str, Any]) -> ApiKey:
    """Convert database row to ApiKey domain model."""
    return ApiKey(
        id=ApiKeyId(row["id"]),
        partner_key=row["partner_key"],
        partner_name=row["partner_name"],
        key=row["key"],
        key_prefix=row["key_prefix"],
        scopes=list(row.get("scopes") or []),
        allowed_ips=list(row.get("allowed_ips") or []),
        allowed_origins=list(row.get("allowed_origins") or []),
        rate_limit_per_minute=row["rate_limit_per_minute"],
        is_active=row["is_active"],
        expires_at=row.get("expires_at"),
        usage_count=row["usage_count"],
        last_used_at=row.get("last_used_at"),
        description=row.get("description"),
        created_at=row["created_at"],
        updated_at=row.get("updated_at"),
        created_by=row.get("created_by"),
        updated_by=row.get("updated_by"),
    )


def api_key_to_dict(api_key: ApiKey) -> Dict[str, Any]:
    """Convert ApiKey domain model to database dict."""
    return api_key.model_dump()
