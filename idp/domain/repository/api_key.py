"""API key repository interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from idp.domain.model.api_key import ApiKey
from idp.domain.value import ApiKeyId


class ApiKeyRepository(ABC):
    """Repository for partner API keys."""

    @abstractmethod
    async def next_id(self) -> ApiKeyId:
        """Reserve an identifier for a new key."""
        pass

    @abstractmethod
    async def find_by_id(self, key_id: ApiKeyId) -> Optional[ApiKey]:
        """Find a key by ID."""
        pass

    @abstractmethod
    async def find_by_key(self, key: str) -> Optional[ApiKey]:
        """Find a key by its full secret.

        Args:
            key: The secret presented by the partner

        Returns:
            The key if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_partner_key(self, partner_key: str) -> Optional[ApiKey]:
        """Find a key by partner slug."""
        pass

    @abstractmethod
    async def find_all(self) -> list[ApiKey]:
        """List every key ordered by partner name."""
        pass

    @abstractmethod
    async def add(self, api_key: ApiKey) -> ApiKey:
        """Insert a new key.

        Raises:
            DuplicateCredentialError: If the partner key or secret already exists
        """
        pass

    @abstractmethod
    async def save(self, api_key: ApiKey) -> ApiKey:
        """Update an existing key."""
        pass

    @abstractmethod
    async def delete(self, key_id: ApiKeyId) -> None:
        """Delete a key."""
        pass

    @abstractmethod
    async def record_usage(self, key: str, used_at: datetime) -> None:
        """Atomically increment usage count and set last-used time."""
        pass
