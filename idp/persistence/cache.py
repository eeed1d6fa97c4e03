"""Process-local API key lookup cache.

Entries live only in this process; a key revoked through another instance
keeps validating here until its entry expires.
"""

import threading
from datetime import datetime, timedelta
from typing import Optional

from idp.domain.model.api_key import ApiKey
from idp.domain.service.api_key_service import ApiKeyCache, CachedApiKey
from idp.util.clock import Clock

CACHE_KEY_PREFIX = "apikey_"


class InMemoryApiKeyCache(ApiKeyCache):
    """Dictionary-backed cache with per-entry expiry read from the clock.

    Bounded: expired entries are swept on write, at most once per
    ``sweep_interval`` or whenever the cache is full, and if it is still
    full the oldest entry is evicted.
    """

    def __init__(
        self,
        clock: Clock,
        max_entries: int = 10_000,
        sweep_interval: timedelta = timedelta(seconds=60),
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.clock = clock
        self.max_entries = max_entries
        self.sweep_interval = sweep_interval
        # Insertion order doubles as age order; set() re-inserts at the end
        self._entries: dict[str, tuple[CachedApiKey, datetime]] = {}
        self._next_sweep = clock.now() + sweep_interval
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    async def get(self, key: str) -> Optional[CachedApiKey]:
        with self._lock:
            entry = self._entries.get(CACHE_KEY_PREFIX + key)
            if entry is None:
                return None
            cached, expires_at = entry
            if self.clock.now() >= expires_at:
                del self._entries[CACHE_KEY_PREFIX + key]
                return None
            return cached

    async def set(self, key: str, api_key: Optional[ApiKey], ttl: timedelta) -> None:
        now = self.clock.now()
        with self._lock:
            self._entries.pop(CACHE_KEY_PREFIX + key, None)
            if now >= self._next_sweep or len(self._entries) >= self.max_entries:
                self._sweep(now)
            while len(self._entries) >= self.max_entries:
                del self._entries[next(iter(self._entries))]
            self._entries[CACHE_KEY_PREFIX + key] = (
                CachedApiKey(api_key=api_key),
                now + ttl,
            )

    async def invalidate(self, key: str) -> None:
        with self._lock:
            self._entries.pop(CACHE_KEY_PREFIX + key, None)

    async def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _sweep(self, now: datetime) -> None:
        """Drop expired entries. Caller holds the lock."""
        expired = [k for k, (_, expires_at) in self._entries.items() if now >= expires_at]
        for k in expired:
            del self._entries[k]
        self._next_sweep = now + self.sweep_interval
