"""Persistence infrastructure providers."""

from dishka import Scope, provide

from threadsync.config import CacheSettings
from threadsync.domain.repository import SnapshotRepository
from threadsync.persistence.repository import FileSnapshotRepository
from threadsync.util.di.base import ProviderBase
from threadsync.util.error import ConfigurationError


class PersistenceProvider(ProviderBase):
    """Persistence component base."""

    __mock_component__ = "persistence"


class ProdPersistenceProvider(PersistenceProvider):
    """Production persistence provider writing snapshots to disk."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    def get_snapshot_repository(
        self, cache_settings: CacheSettings
    ) -> SnapshotRepository:
        """Provide file-backed snapshot repository.

        Raises:
            ConfigurationError: If the cache key is not a plain file name
        """
        key = cache_settings.key
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise ConfigurationError("CACHE__KEY", f"must be a plain file name, got {key!r}")
        return FileSnapshotRepository(directory=cache_settings.directory, key=key)
