"""List and get API key use cases."""

from pydantic import BaseModel

from idp.application.usecase.base import BaseUseCase
from idp.domain.service import ApiKeyService
from idp.domain.value import ApiKeyId

from .info import ApiKeyInfo


class ListApiKeysRequest(BaseModel):
    pass


class ListApiKeysResponse(BaseModel):
    keys: list[ApiKeyInfo]


class ListApiKeysUseCase(BaseUseCase[ListApiKeysRequest, ListApiKeysResponse]):
    """List every partner key, secrets masked."""

    def __init__(self, api_key_service: ApiKeyService) -> None:
        self.api_key_service = api_key_service

    async def execute(self, request: ListApiKeysRequest) -> ListApiKeysResponse:
        keys = await self.api_key_service.list_keys()
        return ListApiKeysResponse(keys=[ApiKeyInfo.from_key(k) for k in keys])


class GetApiKeyRequest(BaseModel):
    key_id: int


class GetApiKeyUseCase(BaseUseCase[GetApiKeyRequest, ApiKeyInfo]):
    """Get one key, secret masked.

    Raises:
        NotFoundError: If the key doesn't exist
    """

    def __init__(self, api_key_service: ApiKeyService) -> None:
        self.api_key_service = api_key_service

    async def execute(self, request: GetApiKeyRequest) -> ApiKeyInfo:
        api_key = await self.api_key_service.get_key(ApiKeyId(request.key_id))
        return ApiKeyInfo.from_key(api_key)
