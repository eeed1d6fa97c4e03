"""Update API key use case."""

from datetime import datetime

from pydantic import BaseModel, Field

from idp.application.usecase.base import BaseUseCase
from idp.domain.service import ApiKeyService
from idp.domain.value import ApiKeyId

from .info import ApiKeyInfo


class UpdateApiKeyFields(BaseModel):
    """Fields left as None are not changed.

    Use the ``clear_*`` flags to remove an expiry or a description.
    """

    partner_name: str | None = None
    scopes: list[str] | None = None
    allowed_ips: list[str] | None = None
    allowed_origins: list[str] | None = None
    rate_limit_per_minute: int | None = Field(default=None, ge=0)
    is_active: bool | None = None
    expires_at: datetime | None = None
    description: str | None = None
    updated_by: str | None = None
    clear_expires_at: bool = False
    clear_description: bool = False


class UpdateApiKeyRequest(UpdateApiKeyFields):
    key_id: int


class UpdateApiKeyUseCase(BaseUseCase[UpdateApiKeyRequest, ApiKeyInfo]):
    """Change key settings."""

    def __init__(self, api_key_service: ApiKeyService) -> None:
        self.api_key_service = api_key_service

    async def execute(self, request: UpdateApiKeyRequest) -> ApiKeyInfo:
        api_key = await self.api_key_service.update_key(
            ApiKeyId(request.key_id),
            partner_name=request.partner_name,
            scopes=request.scopes,
            allowed_ips=request.allowed_ips,
            allowed_origins=request.allowed_origins,
            rate_limit_per_minute=request.rate_limit_per_minute,
            is_active=request.is_active,
            expires_at=request.expires_at,
            description=request.description,
            updated_by=request.updated_by,
            clear_expires_at=request.clear_expires_at,
            clear_description=request.clear_description,
        )
        return ApiKeyInfo.from_key(api_key)
