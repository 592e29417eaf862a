"""Repository interfaces for the forum sync layer.

Repository interfaces are defined in the domain layer (dependency inversion).
Implementations live in the persistence layer.
"""

from threadsync.domain.repository.snapshot import SnapshotRepository

__all__ = [
    "SnapshotRepository",
]
