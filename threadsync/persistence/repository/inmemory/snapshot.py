"""In-memory snapshot repository for testing."""

from typing import Optional

from threadsync.domain.model import CacheEntry
from threadsync.domain.repository import SnapshotRepository


class InMemorySnapshotRepository(SnapshotRepository):
    """In-memory implementation of SnapshotRepository for testing.

    Counts writes so tests can assert on debounced persistence.
    """

    def __init__(self, entry: Optional[CacheEntry] = None) -> None:
        self._entry = entry
        self.save_count = 0

    def load(self) -> Optional[CacheEntry]:
        """Return the stored entry."""
        return self._entry

    def save(self, entry: CacheEntry) -> None:
        """Replace the stored entry."""
        self._entry = entry
        self.save_count += 1

    def clear(self) -> None:
        """Drop the stored entry."""
        self._entry = None
