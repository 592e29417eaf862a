"""File-backed snapshot repository.

Layout inside the cache directory:
- ``<key>.json``: JSON array of threads
- ``<key>.last_updated``: ISO-8601 time of the last successful full fetch
"""

import os
from datetime import datetime
from pathlib import Path
from typing import Optional

import logfire
from pydantic import TypeAdapter, ValidationError

from threadsync.domain.model import CacheEntry, Thread
from threadsync.domain.repository import SnapshotRepository
from threadsync.persistence.error import CacheCorruptedError

_threads_adapter = TypeAdapter(tuple[Thread, ...])


class FileSnapshotRepository(SnapshotRepository):
    """Snapshot repository writing two files per cache key."""

    def __init__(self, directory: Path, key: str = "threadStoreData") -> None:
        """Initialize repository.

        Args:
            directory: Cache directory, created on first write
            key: Storage key used for file names
        """
        self.directory = Path(directory)
        self.key = key

    @property
    def snapshot_path(self) -> Path:
        return self.directory / f"{self.key}.json"

    @property
    def timestamp_path(self) -> Path:
        return self.directory / f"{self.key}.last_updated"

    def load(self) -> Optional[CacheEntry]:
        """Load snapshot; a corrupt blob is reported and treated as a miss."""
        if not self.snapshot_path.exists():
            return None
        try:
            threads = self._read_threads()
        except CacheCorruptedError as e:
            logfire.warn("Ignoring corrupt snapshot", path=e.path, error=str(e))
            return None
        return CacheEntry(snapshot=threads, last_updated=self._read_timestamp())

    def save(self, entry: CacheEntry) -> None:
        """Write snapshot and timestamp, replacing any previous ones.

        Blocking file I/O. The thread store calls this from its debounce timer
        on the event loop, which is fine for a few pages of threads.
        """
        self.directory.mkdir(parents=True, exist_ok=True)
        self._write_atomic(
            self.snapshot_path, _threads_adapter.dump_json(entry.snapshot, by_alias=True)
        )
        if entry.last_updated is None:
            self.timestamp_path.unlink(missing_ok=True)
        else:
            self._write_atomic(
                self.timestamp_path, entry.last_updated.isoformat().encode("utf-8")
            )
        logfire.debug(
            "Snapshot written",
            path=str(self.snapshot_path),
            count=len(entry.snapshot),
        )

    def clear(self) -> None:
        self.snapshot_path.unlink(missing_ok=True)
        self.timestamp_path.unlink(missing_ok=True)

    def _read_threads(self) -> tuple[Thread, ...]:
        try:
            return _threads_adapter.validate_json(self.snapshot_path.read_bytes())
        except (OSError, ValidationError) as e:
            raise CacheCorruptedError(str(self.snapshot_path), str(e)) from e

    def _read_timestamp(self) -> Optional[datetime]:
        # A missing or garbled timestamp only makes the snapshot stale
        try:
            raw = self.timestamp_path.read_text(encoding="utf-8").strip()
        except OSError:
            return None
        try:
            return datetime.fromisoformat(raw)
        except ValueError:
            logfire.warn("Ignoring unparseable snapshot timestamp", value=raw[:64])
            return None

    @staticmethod
    def _write_atomic(path: Path, data: bytes) -> None:
        tmp = path.with_name(path.name + ".tmp")
        tmp.write_bytes(data)
        os.replace(tmp, path)
