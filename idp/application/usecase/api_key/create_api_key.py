"""Create API key use case."""

from datetime import datetime

import logfire
from pydantic import BaseModel, Field

from idp.application.usecase.base import BaseUseCase
from idp.domain.service import ApiKeyService

from .info import ApiKeyWithSecret


class CreateApiKeyRequest(BaseModel):
    """New partner key settings."""

    partner_key: str
    partner_name: str
    scopes: list[str] = Field(default_factory=list)
    allowed_ips: list[str] = Field(default_factory=list)
    allowed_origins: list[str] = Field(default_factory=list)
    rate_limit_per_minute: int = Field(default=60, ge=0)
    expires_at: datetime | None = None
    description: str | None = None
    created_by: str | None = None  # Partner key of the admin caller


class CreateApiKeyUseCase(BaseUseCase[CreateApiKeyRequest, ApiKeyWithSecret]):
    """Create a partner key and return its secret once."""

    def __init__(self, api_key_service: ApiKeyService) -> None:
        self.api_key_service = api_key_service

    async def execute(self, request: CreateApiKeyRequest) -> ApiKeyWithSecret:
        """Create the key.

        Raises:
            ValidationError: If the partner key or a scope is invalid
            DuplicateCredentialError: If the partner already has a key
        """
        with logfire.span("create_api_key", partner_key=request.partner_key):
            api_key = await self.api_key_service.create_key(
                partner_key=request.partner_key,
                partner_name=request.partner_name,
                scopes=request.scopes,
                allowed_ips=request.allowed_ips,
                allowed_origins=request.allowed_origins,
                rate_limit_per_minute=request.rate_limit_per_minute,
                expires_at=request.expires_at,
                description=request.description,
                created_by=request.created_by,
            )
            return ApiKeyWithSecret.from_key(api_key)
