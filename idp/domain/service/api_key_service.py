"""Partner API key domain service."""

import secrets
import string
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Optional

import logfire
from pydantic import ValidationError as PydanticValidationError

from idp.config import ApiKeySettings
from idp.domain.error import DuplicateCredentialError, NotFoundError, ValidationError
from idp.domain.model.api_key import ApiKey
from idp.domain.repository import AfterCommit, ApiKeyRepository
from idp.domain.value import ApiKeyId, ApiScope, PartnerKey
from idp.domain.value.common import ValueObject
from idp.util.clock import Clock

from .base import Service

SECRET_ALPHABET = string.ascii_letters + string.digits
SECRET_LENGTH = 32


class CachedApiKey(ValueObject):
    """Cache entry; ``api_key`` is None for a remembered miss."""

    api_key: Optional[ApiKey] = None


class ApiKeyCache(ABC):
    """Short-lived cache of key lookups, keyed by the exact secret."""

    @abstractmethod
    async def get(self, key: str) -> Optional[CachedApiKey]:
        """Return the live entry for ``key``, or None when absent or expired."""
        pass

    @abstractmethod
    async def set(self, key: str, api_key: Optional[ApiKey], ttl: timedelta) -> None:
        """Remember a lookup result (None records a miss)."""
        pass

    @abstractmethod
    async def invalidate(self, key: str) -> None:
        """Drop any entry for ``key``."""
        pass

    @abstractmethod
    async def clear(self) -> None:
        """Drop every entry."""
        pass


def key_prefix(partner_key: str) -> str:
    """Public part of a key: ``pk_<partner[:4]>_``. Holds nothing secret."""
    return f"pk_{partner_key[:4]}_"


def generate_secret(partner_key: str) -> str:
    """Mint a key: the public prefix followed by 32 random characters."""
    random_part = "".join(secrets.choice(SECRET_ALPHABET) for _ in range(SECRET_LENGTH))
    return key_prefix(partner_key) + random_part


def _check_scopes(scopes: list[str]) -> list[str]:
    unknown = sorted(set(scopes) - ApiScope.values())
    if unknown:
        raise ValidationError(f"Invalid scopes: {', '.join(unknown)}")
    # Keep caller order, drop duplicates
    return list(dict.fromkeys(scopes))


class ApiKeyService(Service):
    """Validates partner keys and manages their lifecycle.

    Lookups are cached per process: valid keys for minutes, misses for
    seconds. Every mutation drops the cached copy of the affected secret
    at once and again after its transaction commits, so a copy re-cached
    from the old committed row in between does not survive. Other
    processes keep serving their copy until it expires.
    """

    def __init__(
        self,
        api_key_repository: ApiKeyRepository,
        cache: ApiKeyCache,
        api_key_settings: ApiKeySettings,
        clock: Clock,
        after_commit: AfterCommit,
    ) -> None:
        """Initialize API key service.

        Args:
            api_key_repository: API key repository
            cache: Lookup cache
            api_key_settings: Cache TTLs
            clock: Time source
            after_commit: Hooks run once the request transaction commits
        """
        self.api_key_repository = api_key_repository
        self.cache = cache
        self.settings = api_key_settings
        self.clock = clock
        self.after_commit = after_commit

    async def validate(self, key: Optional[str]) -> Optional[ApiKey]:
        """Resolve a presented secret to a currently valid key.

        Args:
            key: Secret from the request

        Returns:
            The key if it exists, is active and has not expired
        """
        if not key:
            return None

        with logfire.span("api_key_service.validate"):
            cached = await self.cache.get(key)
            if cached is not None:
                api_key = cached.api_key
            else:
                api_key = await self.api_key_repository.find_by_key(key)
                if api_key is not None and api_key.is_valid(self.clock.now()):
                    await self.cache.set(
                        key, api_key, timedelta(seconds=self.settings.cache_ttl_seconds)
                    )
                else:
                    await self.cache.set(
                        key,
                        None,
                        timedelta(seconds=self.settings.negative_cache_ttl_seconds),
                    )

            # A cached key may have expired since it was cached
            if api_key is None or not api_key.is_valid(self.clock.now()):
                logfire.info("API key rejected")
                return None
            return api_key

    async def has_scope(self, key: Optional[str], scope: str) -> bool:
        """Check a presented secret grants ``scope``."""
        api_key = await self.validate(key)
        return api_key is not None and api_key.has_scope(scope)

    async def record_usage(self, key: str) -> None:
        """Count one use of the key.

        Best effort: failures are logged and never raised.
        """
        try:
            await self.api_key_repository.record_usage(key, self.clock.now())
        except Exception as e:
            logfire.warn("Failed to record API key usage", error=str(e))

    async def get_key(self, key_id: ApiKeyId) -> ApiKey:
        """Get a key by ID.

        Raises:
            NotFoundError: If key doesn't exist
        """
        api_key = await self.api_key_repository.find_by_id(key_id)
        if not api_key:
            raise NotFoundError("API key", str(key_id))
        return api_key

    async def list_keys(self) -> list[ApiKey]:
        return await self.api_key_repository.find_all()

    async def create_key(
        self,
        partner_key: str,
        partner_name: str,
        scopes: list[str],
        allowed_ips: Optional[list[str]] = None,
        allowed_origins: Optional[list[str]] = None,
        rate_limit_per_minute: int = 60,
        expires_at: Optional[datetime] = None,
        description: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> ApiKey:
        """Create a key for a partner.

        The returned key carries the full secret; listings only show the
        prefix afterwards.

        Raises:
            ValidationError: If the partner key or a scope is invalid
            DuplicateCredentialError: If the partner already has a key
        """
        try:
            partner_key = PartnerKey(partner_key).root
        except PydanticValidationError:
            raise ValidationError(
                "Partner key must contain only lowercase letters, numbers, and hyphens."
            )
        scopes = _check_scopes(scopes)

        with logfire.span("api_key_service.create_key", partner_key=partner_key):
            if await self.api_key_repository.find_by_partner_key(partner_key):
                raise DuplicateCredentialError(
                    f"An API key for partner '{partner_key}' already exists."
                )

            secret = generate_secret(partner_key)
            api_key = await self.api_key_repository.add(
                ApiKey(
                    id=await self.api_key_repository.next_id(),
                    partner_key=partner_key,
                    partner_name=partner_name,
                    key=secret,
                    key_prefix=key_prefix(partner_key),
                    scopes=scopes,
                    allowed_ips=allowed_ips or [],
                    allowed_origins=allowed_origins or [],
                    rate_limit_per_minute=rate_limit_per_minute,
                    expires_at=expires_at,
                    description=description,
                    created_at=self.clock.now(),
                    created_by=created_by,
                )
            )
            logfire.info("API key created", key_id=api_key.id, partner_key=partner_key)
            return api_key

    async def update_key(
        self,
        key_id: ApiKeyId,
        partner_name: Optional[str] = None,
        scopes: Optional[list[str]] = None,
        allowed_ips: Optional[list[str]] = None,
        allowed_origins: Optional[list[str]] = None,
        rate_limit_per_minute: Optional[int] = None,
        is_active: Optional[bool] = None,
        expires_at: Optional[datetime] = None,
        description: Optional[str] = None,
        updated_by: Optional[str] = None,
        clear_expires_at: bool = False,
        clear_description: bool = False,
    ) -> ApiKey:
        """Update key settings; None leaves a field unchanged.

        ``clear_expires_at`` makes the key permanent and ``clear_description``
        removes the description; neither may be combined with a new value.

        Raises:
            NotFoundError: If key doesn't exist
            ValidationError: If a scope is invalid or a clear conflicts
                with a new value
        """
        if clear_expires_at and expires_at is not None:
            raise ValidationError("Set expires_at or clear it, not both.")
        if clear_description and description is not None:
            raise ValidationError("Set description or clear it, not both.")

        with logfire.span("api_key_service.update_key", key_id=key_id):
            api_key = await self.get_key(key_id)

            update: dict = {"updated_at": self.clock.now(), "updated_by": updated_by}
            if partner_name is not None:
                update["partner_name"] = partner_name
            if scopes is not None:
                update["scopes"] = _check_scopes(scopes)
            if allowed_ips is not None:
                update["allowed_ips"] = allowed_ips
            if allowed_origins is not None:
                update["allowed_origins"] = allowed_origins
            if rate_limit_per_minute is not None:
                update["rate_limit_per_minute"] = rate_limit_per_minute
            if is_active is not None:
                update["is_active"] = is_active
            if expires_at is not None or clear_expires_at:
                update["expires_at"] = expires_at
            if description is not None or clear_description:
                update["description"] = description

            updated = await self.api_key_repository.save(api_key.model_copy(update=update))
            await self._invalidate(api_key.key)
            logfire.info("API key updated", key_id=key_id)
            return updated

    async def toggle_key(self, key_id: ApiKeyId) -> ApiKey:
        """Flip the active flag.

        Raises:
            NotFoundError: If key doesn't exist
        """
        api_key = await self.get_key(key_id)
        updated = await self.api_key_repository.save(
            api_key.model_copy(
                update={"is_active": not api_key.is_active, "updated_at": self.clock.now()}
            )
        )
        await self._invalidate(api_key.key)
        logfire.info("API key toggled", key_id=key_id, is_active=updated.is_active)
        return updated

    async def regenerate_key(self, key_id: ApiKeyId) -> ApiKey:
        """Replace the secret and reset usage counters.

        The old secret stops validating immediately in this process.

        Raises:
            NotFoundError: If key doesn't exist
        """
        with logfire.span("api_key_service.regenerate_key", key_id=key_id):
            api_key = await self.get_key(key_id)
            secret = generate_secret(api_key.partner_key)
            updated = await self.api_key_repository.save(
                api_key.model_copy(
                    update={
                        "key": secret,
                        "key_prefix": key_prefix(api_key.partner_key),
                        "usage_count": 0,
                        "last_used_at": None,
                        "updated_at": self.clock.now(),
                    }
                )
            )
            await self._invalidate(api_key.key)
            logfire.info("API key regenerated", key_id=key_id)
            return updated

    async def delete_key(self, key_id: ApiKeyId) -> None:
        """Delete a key.

        Raises:
            NotFoundError: If key doesn't exist
        """
        api_key = await self.get_key(key_id)
        await self.api_key_repository.delete(key_id)
        await self._invalidate(api_key.key)
        logfire.info("API key deleted", key_id=key_id, partner_key=api_key.partner_key)

    async def _invalidate(self, key: str) -> None:
        """Drop the cached lookup for ``key`` now and after commit."""
        await self.cache.invalidate(key)
        self.after_commit.add(lambda: self.cache.invalidate(key))
