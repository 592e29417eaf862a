"""Snapshot repository interface."""

from abc import ABC, abstractmethod
from typing import Optional

from threadsync.domain.model import CacheEntry


class SnapshotRepository(ABC):
    """Durable mirror of the thread collection.

    Never a source of truth: whatever the store holds in memory is what gets
    written. Reads and writes are synchronous so a fresh snapshot can be
    served without awaiting.
    """

    @abstractmethod
    def load(self) -> Optional[CacheEntry]:
        """Load the last written snapshot.

        Returns:
            The snapshot, or None if nothing usable is stored. An unreadable
            blob counts as nothing stored.
        """
        pass

    @abstractmethod
    def save(self, entry: CacheEntry) -> None:
        """Overwrite the stored snapshot and its timestamp.

        Args:
            entry: Collection snapshot and last full-fetch time
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove the stored snapshot."""
        pass
