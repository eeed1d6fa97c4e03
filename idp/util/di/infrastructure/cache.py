"""API key cache provider."""

from datetime import timedelta

from dishka import Scope, provide

from idp.config import ApiKeySettings
from idp.domain.service import ApiKeyCache
from idp.persistence.cache import InMemoryApiKeyCache
from idp.util.clock import Clock
from idp.util.di.base import ProviderBase


class CacheProvider(ProviderBase):
    """Process-wide API key cache - concrete, shared by all requests."""

    @provide(scope=Scope.APP)
    def get_api_key_cache(
        self, clock: Clock, api_key_settings: ApiKeySettings
    ) -> ApiKeyCache:
        return InMemoryApiKeyCache(
            clock,
            max_entries=api_key_settings.cache_max_entries,
            sweep_interval=timedelta(
                seconds=api_key_settings.cache_sweep_interval_seconds
            ),
        )
