"""Partner API key entity."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import Field

from idp.domain.model.common import DomainModel
from idp.domain.value import ApiKeyId, ApiScope


class ApiKey(DomainModel):
    """Credential for a partner calling this service server-to-server.

    Keys are independent of users. A key is valid while active and not
    past its optional expiry.
    """

    id: ApiKeyId
    partner_key: str  # Unique partner slug
    partner_name: str
    key: str  # Full secret, unique
    key_prefix: str  # Shown in listings instead of the secret
    scopes: list[str] = Field(default_factory=list)
    allowed_ips: list[str] = Field(default_factory=list)
    allowed_origins: list[str] = Field(default_factory=list)
    rate_limit_per_minute: int = Field(default=60, ge=0)
    is_active: bool = True
    expires_at: Optional[datetime] = None
    usage_count: int = Field(default=0, ge=0)
    last_used_at: Optional[datetime] = None
    description: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: Optional[datetime] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None

    def is_valid(self, now: datetime) -> bool:
        return self.is_active and (self.expires_at is None or self.expires_at > now)

    def has_scope(self, scope: str) -> bool:
        """Scope check; ``admin`` grants everything, no scopes grants nothing."""
        return ApiScope.ADMIN.value in self.scopes or scope in self.scopes

    def allows_ip(self, client_ip: str | None) -> bool:
        """Exact-match IP allow-list; an empty list or ``*`` admits anyone.

        CIDR ranges are not interpreted.
        """
        if not self.allowed_ips or "*" in self.allowed_ips:
            return True
        return client_ip is not None and client_ip in self.allowed_ips

    @property
    def masked_key(self) -> str:
        return f"{self.key_prefix}..."
