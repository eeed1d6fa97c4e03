"""External login entity.

Binds one third-party identity (Google, Apple, ...) to a user account.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import Field

from idp.domain.model.common import DomainModel
from idp.domain.value import ExternalLoginId, UserId


class ExternalLogin(DomainModel):
    """Third-party identity linked to a user.

    ``(provider, provider_user_id)`` is globally unique and a user has at
    most one login per provider.
    """

    id: ExternalLoginId
    user_id: UserId
    provider: str  # Lowercased provider name
    provider_user_id: str  # Permanent ID assigned by the provider
    provider_email: Optional[str] = None
    provider_display_name: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    last_used_at: Optional[datetime] = None
