"""Core DI providers (non-mockable)."""

from dishka import Scope, provide

from threadsync.config import CacheSettings, Settings, SyncSettings
from threadsync.util.clock import Clock, SystemClock
from threadsync.util.di.base import ProviderBase


class ProdConfigProvider(ProviderBase):
    """Production config provider - concrete, no mocks needed.

    Settings are loaded from environment variables and .env file automatically.
    """

    @provide(scope=Scope.APP)
    def provide_settings(self) -> Settings:
        """Provide application settings from environment."""
        return Settings()

    @provide(scope=Scope.APP)
    def provide_sync_settings(self, settings: Settings) -> SyncSettings:
        """Provide store synchronization settings."""
        return settings.sync

    @provide(scope=Scope.APP)
    def provide_cache_settings(self, settings: Settings) -> CacheSettings:
        """Provide snapshot cache settings."""
        return settings.cache

    @provide(scope=Scope.APP)
    def provide_clock(self) -> Clock:
        """Provide wall clock."""
        return SystemClock()
