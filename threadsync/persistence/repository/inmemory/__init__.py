"""In-memory repository implementations for testing."""

from .snapshot import InMemorySnapshotRepository

__all__ = [
    "InMemorySnapshotRepository",
]
