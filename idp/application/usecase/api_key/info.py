"""API key views returned by the admin use cases."""

from datetime import datetime

from pydantic import BaseModel

from idp.domain.model import ApiKey


class ApiKeyInfo(BaseModel):
    """Key metadata; the secret is shown only as its prefix."""

    id: int
    partner_key: str
    partner_name: str
    key_prefix: str
    scopes: list[str]
    allowed_ips: list[str]
    allowed_origins: list[str]
    rate_limit_per_minute: int
    is_active: bool
    expires_at: datetime | None
    usage_count: int
    last_used_at: datetime | None
    description: str | None
    created_at: datetime
    updated_at: datetime | None
    created_by: str | None

    @classmethod
    def from_key(cls, api_key: ApiKey) -> "ApiKeyInfo":
        return cls(
            id=api_key.id,
            partner_key=api_key.partner_key,
            partner_name=api_key.partner_name,
            key_prefix=api_key.masked_key,
            scopes=api_key.scopes,
            allowed_ips=api_key.allowed_ips,
            allowed_origins=api_key.allowed_origins,
            rate_limit_per_minute=api_key.rate_limit_per_minute,
            is_active=api_key.is_active,
            expires_at=api_key.expires_at,
            usage_count=api_key.usage_count,
            last_used_at=api_key.last_used_at,
            description=api_key.description,
            created_at=api_key.created_at,
            updated_at=api_key.updated_at,
            created_by=api_key.created_by,
        )


class ApiKeyWithSecret(ApiKeyInfo):
    """Returned once, on create and regenerate."""

    key: str

    @classmethod
    def from_key(cls, api_key: ApiKey) -> "ApiKeyWithSecret":
        return cls(**ApiKeyInfo.from_key(api_key).model_dump(), key=api_key.key)
