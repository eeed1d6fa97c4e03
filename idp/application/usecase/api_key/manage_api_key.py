"""Toggle, regenerate and delete API key use cases.

All three take a key ID and raise NotFoundError when it doesn't exist.
"""

from pydantic import BaseModel

from idp.application.usecase.base import BaseUseCase
from idp.domain.service import ApiKeyService
from idp.domain.value import ApiKeyId

from .info import ApiKeyInfo, ApiKeyWithSecret


class ApiKeyIdRequest(BaseModel):
    key_id: int


class DeleteApiKeyResponse(BaseModel):
    success: bool
    message: str


class ToggleApiKeyUseCase(BaseUseCase[ApiKeyIdRequest, ApiKeyInfo]):
    """Activate an inactive key or deactivate an active one."""

    def __init__(self, api_key_service: ApiKeyService) -> None:
        self.api_key_service = api_key_service

    async def execute(self, request: ApiKeyIdRequest) -> ApiKeyInfo:
        api_key = await self.api_key_service.toggle_key(ApiKeyId(request.key_id))
        return ApiKeyInfo.from_key(api_key)


class RegenerateApiKeyUseCase(BaseUseCase[ApiKeyIdRequest, ApiKeyWithSecret]):
    """Issue a new secret; the old one stops working."""

    def __init__(self, api_key_service: ApiKeyService) -> None:
        self.api_key_service = api_key_service

    async def execute(self, request: ApiKeyIdRequest) -> ApiKeyWithSecret:
        api_key = await self.api_key_service.regenerate_key(ApiKeyId(request.key_id))
        return ApiKeyWithSecret.from_key(api_key)


class DeleteApiKeyUseCase(BaseUseCase[ApiKeyIdRequest, DeleteApiKeyResponse]):
    def __init__(self, api_key_service: ApiKeyService) -> None:
        self.api_key_service = api_key_service

    async def execute(self, request: ApiKeyIdRequest) -> DeleteApiKeyResponse:
        await self.api_key_service.delete_key(ApiKeyId(request.key_id))
        return DeleteApiKeyResponse(success=True, message="API key deleted.")
