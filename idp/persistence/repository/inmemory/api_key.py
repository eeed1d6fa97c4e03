"""In-memory API key repository for testing."""

from datetime import datetime
from itertools import count
from typing import Optional

from idp.domain.error import DuplicateCredentialError
from idp.domain.model.api_key import ApiKey
from idp.domain.repository.api_key import ApiKeyRepository
from idp.domain.value import ApiKeyId


class InMemoryApiKeyRepository(ApiKeyRepository):
    """In-memory implementation of ApiKeyRepository for testing."""

    def __init__(self) -> None:
        self._keys: dict[ApiKeyId, ApiKey] = {}
        self._ids = count(1)

    async def next_id(self) -> ApiKeyId:
        return ApiKeyId(next(self._ids))

    async def find_by_id(self, key_id: ApiKeyId) -> Optional[ApiKey]:
        return self._keys.get(key_id)

    async def find_by_key(self, key: str) -> Optional[ApiKey]:
        for api_key in self._keys.values():
            if api_key.key == key:
                return api_key
        return None

    async def find_by_partner_key(self, partner_key: str) -> Optional[ApiKey]:
        for api_key in self._keys.values():
            if api_key.partner_key == partner_key:
                return api_key
        return None

    async def find_all(self) -> list[ApiKey]:
        return sorted(self._keys.values(), key=lambda k: (k.partner_name, k.id))

    async def add(self, api_key: ApiKey) -> ApiKey:
        """Insert key, enforcing unique partner key and secret."""
        for other in self._keys.values():
            if other.partner_key == api_key.partner_key or other.key == api_key.key:
                raise DuplicateCredentialError(
                    f"An API key for partner '{api_key.partner_key}' already exists."
                )
        self._keys[api_key.id] = api_key
        return api_key

    async def save(self, api_key: ApiKey) -> ApiKey:
        self._keys[api_key.id] = api_key
        return api_key

    async def delete(self, key_id: ApiKeyId) -> None:
        self._keys.pop(key_id, None)

    async def record_usage(self, key: str, used_at: datetime) -> None:
        api_key = await self.find_by_key(key)
        if api_key is None:
            return
        self._keys[api_key.id] = api_key.model_copy(
            update={"usage_count": api_key.usage_count + 1, "last_used_at": used_at}
        )
