"""Snapshot repository implementations."""

from .file import FileSnapshotRepository

__all__ = [
    "FileSnapshotRepository",
]
