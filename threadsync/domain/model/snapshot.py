"""Persisted snapshot of the thread collection."""

from datetime import datetime
from typing import Optional

from threadsync.domain.model.common import DomainModel
from threadsync.domain.model.thread import Thread


class CacheEntry(DomainModel):
    """Last known collection plus the time of the last successful full fetch.

    ``last_updated`` is None when the snapshot was never backed by a fetch,
    which the freshness policy treats as stale.
    """

    snapshot: tuple[Thread, ...] = ()
    last_updated: Optional[datetime] = None
