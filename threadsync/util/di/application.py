"""Application layer DI providers."""

from collections.abc import Iterator

from dishka import Scope, provide

from threadsync.application.store import ThreadStore
from threadsync.config import SyncSettings
from threadsync.domain.repository import SnapshotRepository
from threadsync.domain.service import ForumClient
from threadsync.util.clock import Clock
from threadsync.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production application provider - concrete, no mocks needed."""

    @provide(scope=Scope.REQUEST)
    def get_thread_store(
        self,
        forum_client: ForumClient,
        snapshot_repository: SnapshotRepository,
        clock: Clock,
        sync_settings: SyncSettings,
    ) -> Iterator[ThreadStore]:
        """Provide thread store for the scope's lifetime.

        The latest state is written out and the store disposed when the
        scope closes.
        """
        store = ThreadStore(
            forum_client=forum_client,
            snapshot_repository=snapshot_repository,
            clock=clock,
            settings=sync_settings,
        )
        yield store
        store.flush()
        store.dispose()
