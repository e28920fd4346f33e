"""Cache entry domain entities."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from itam_sync.keys import CacheKey


@dataclass(frozen=True)
class CacheEntryEntity:
    """Point-in-time snapshot of a cache entry.

    The live entry is owned by the cache; callers only ever see snapshots,
    which also serve as restore points for optimistic updates.

    Attributes:
        key: The cache key
        value: Last fetched (or written) value, None if never loaded
        fetched_at: Clock reading when value was stored, None if never loaded
        ttl: Freshness window in seconds
        last_read_at: Clock reading of the last read, used for idle purges
        is_invalidated: True once invalidated until the next successful store
        is_fetching: True while a fetch is in flight
        error: The last fetch error, cleared by the next successful store
    """

    key: CacheKey
    value: Any
    fetched_at: float | None
    ttl: float
    last_read_at: float
    is_invalidated: bool = False
    is_fetching: bool = False
    error: BaseException | None = None

    def is_fresh(self, now: float) -> bool:
        """Whether the value may be served without a refetch."""
        if self.fetched_at is None or self.is_invalidated:
            return False
        return now - self.fetched_at < self.ttl


class CacheEventKind(str, Enum):
    UPDATED = "updated"
    INVALIDATED = "invalidated"
    EVICTED = "evicted"
    ERROR = "error"


@dataclass(frozen=True)
class CacheEvent:
    """Change notification delivered to cache subscribers."""

    key: CacheKey
    kind: CacheEventKind
    value: Any = None
    error: BaseException | None = None
