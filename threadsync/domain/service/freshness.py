"""Snapshot freshness rules."""

from datetime import datetime, timedelta, timezone
from typing import Optional

from threadsync.domain.model import CacheEntry

DEFAULT_TTL = timedelta(minutes=5)


def _aware(moment: datetime) -> datetime:
    # Naive timestamps are taken as UTC
    return moment if moment.tzinfo is not None else moment.replace(tzinfo=timezone.utc)


def is_stale(
    last_updated: Optional[datetime], now: datetime, ttl: timedelta = DEFAULT_TTL
) -> bool:
    """Whether data last fetched at ``last_updated`` must be refetched.

    Args:
        last_updated: Time of the last successful fetch, None if never fetched
        now: Current time
        ttl: Maximum age of usable data

    Returns:
        True when ``now - last_updated`` exceeds ``ttl`` or nothing was recorded
    """
    if last_updated is None:
        return True
    return _aware(now) - _aware(last_updated) > ttl


class FreshnessPolicy:
    """Freshness rule bound to the configured time-to-live."""

    def __init__(self, ttl: timedelta = DEFAULT_TTL) -> None:
        self.ttl = ttl

    def is_usable(self, entry: Optional[CacheEntry], now: datetime) -> bool:
        """Whether a persisted snapshot may be served instead of refetching."""
        if entry is None:
            return False
        return not is_stale(entry.last_updated, now, self.ttl)
