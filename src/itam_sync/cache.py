"""Key-addressed query cache with request coalescing.

One ``QueryCache`` is created per application session and passed to every
service that reads or writes through it.

Guarantees:
    - a value is served without refetching only while ``now - fetched_at < ttl``
      and the entry has not been invalidated
    - at most one fetch is in flight per key; concurrent readers share it,
      independent keys fetch in parallel
    - a fetch that started before an invalidation, write or eviction of its
      key never stores its (possibly outdated) result
    - a reader that is cancelled stops waiting, but the fetch itself runs to
      completion and populates the cache
"""

import asyncio
import contextlib
import time
from collections.abc import Awaitable, Callable, Iterator
from typing import Any

from itam_sync.config import settings
from itam_sync.entities import CacheEntryEntity, CacheEvent, CacheEventKind
from itam_sync.keys import CacheKey, matches_prefix
from itam_sync.log import get_logger
from itam_sync.models import CacheMetrics
from itam_sync.protocols import CacheListener
from itam_sync.retry import RetryPolicy, run_with_retry

logger = get_logger(__name__)

Loader = Callable[[], Awaitable[Any]]


def _consume_exception(task: asyncio.Task) -> None:
    # Marks the error as retrieved when every reader was cancelled; it stays
    # recorded on the entry.
    if not task.cancelled():
        task.exception()


class _Entry:
    """Mutable bookkeeping for one key. Never handed out to callers."""

    __slots__ = (
        "key",
        "value",
        "fetched_at",
        "ttl",
        "last_read_at",
        "invalidated",
        "error",
        "generation",
        "task",
        "task_generation",
    )

    def __init__(self, key: CacheKey, ttl: float, now: float) -> None:
        self.key = key
        self.value: Any = None
        self.fetched_at: float | None = None
        self.ttl = ttl
        self.last_read_at = now
        self.invalidated = False
        self.error: BaseException | None = None
        # Bumped by invalidate/write/restore; a fetch only stores its result
        # if the generation it started under is still current.
        self.generation = 0
        self.task: asyncio.Task | None = None
        self.task_generation = -1

    def is_fresh(self, now: float) -> bool:
        if self.fetched_at is None or self.invalidated:
            return False
        return now - self.fetched_at < self.ttl

    def snapshot(self) -> CacheEntryEntity:
        return CacheEntryEntity(
            key=self.key,
            value=self.value,
            fetched_at=self.fetched_at,
            ttl=self.ttl,
            last_read_at=self.last_read_at,
            is_invalidated=self.invalidated,
            is_fetching=self.task is not None,
            error=self.error,
        )


class Subscription:
    """Handle returned by ``QueryCache.subscribe``."""

    def __init__(self, cache: "QueryCache", key: CacheKey, listener: CacheListener) -> None:
        self._cache = cache
        self.key = key
        self._listener = listener
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        """Stop receiving events. Safe to call more than once."""
        if self._active:
            self._cache._remove_listener(self.key, self._listener)
            self._active = False


class QueryCache:
    """In-memory, time-aware cache of query results.

    Example:
        ```python
        async with QueryCache(stale_time=300) as cache:
            assets = await cache.read(
                ("hardware-assets", "list", ()),
                lambda: client.get("/hardware-assets"),
            )
            cache.invalidate(("hardware-assets", "list"))
        ```
    """

    def __init__(
        self,
        stale_time: float | None = None,
        gc_time: float | None = None,
        gc_interval: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            stale_time: Default TTL in seconds for reads without one. Defaults to settings.
            gc_time: Idle time after which an unobserved entry may be purged.
                Defaults to settings.
            gc_interval: Seconds between background purges. Defaults to settings.
            clock: Monotonic time source (injectable for tests).
        """
        self._stale_time = settings.cache_stale_time if stale_time is None else stale_time
        self._gc_time = settings.cache_gc_time if gc_time is None else gc_time
        self._gc_interval = settings.cache_gc_interval if gc_interval is None else gc_interval
        self._clock = clock
        self._entries: dict[CacheKey, _Entry] = {}
        self._listeners: dict[CacheKey, list[CacheListener]] = {}
        self._tasks: set[asyncio.Task] = set()
        self._gc_task: asyncio.Task | None = None
        self._metrics = CacheMetrics()

    # ------------------------------------------------------------------ reads

    async def read(
        self,
        key: CacheKey,
        loader: Loader,
        ttl: float | None = None,
        retry: RetryPolicy | None = None,
    ) -> Any:
        """Return the value for ``key``, fetching it through ``loader`` if needed.

        Args:
            key: Cache key
            loader: Zero-argument coroutine factory producing the value
            ttl: Freshness window in seconds. Defaults to the cache's stale_time.
            retry: Retry policy wrapped around the loader. Defaults to no retry.

        Returns:
            The cached or freshly fetched value

        Raises:
            Whatever the loader raised on its final attempt
        """
        ttl = self._stale_time if ttl is None else ttl
        now = self._clock()

        entry = self._entries.get(key)
        if entry is None:
            entry = _Entry(key, ttl, now)
            self._entries[key] = entry
        entry.ttl = ttl
        entry.last_read_at = now

        if entry.is_fresh(now):
            self._metrics.record_hit()
            logger.debug("cache_hit", key=key)
            return entry.value

        task = entry.task
        coalesced = task is not None and entry.task_generation == entry.generation
        if not coalesced:
            task = self._start_fetch(entry, loader, retry)
        self._metrics.record_miss(coalesced=coalesced)
        logger.debug("cache_miss", key=key, coalesced=coalesced)

        return await asyncio.shield(task)

    def peek(self, key: CacheKey) -> Any:
        """Stored value for ``key`` (fresh or not), or None. Never fetches."""
        entry = self._entries.get(key)
        return entry.value if entry is not None else None

    def get_entry(self, key: CacheKey) -> CacheEntryEntity | None:
        """Snapshot of the entry for ``key``, or None if absent."""
        entry = self._entries.get(key)
        return entry.snapshot() if entry is not None else None

    def is_stale(self, key: CacheKey) -> bool:
        """True if the next read of ``key`` would fetch."""
        entry = self._entries.get(key)
        return entry is None or not entry.is_fresh(self._clock())

    def is_fetching(self, key: CacheKey) -> bool:
        entry = self._entries.get(key)
        return entry is not None and entry.task is not None

    def keys(self) -> list[CacheKey]:
        return list(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    # -------------------------------------------------------------- fetching

    def _start_fetch(self, entry: _Entry, loader: Loader, retry: RetryPolicy | None) -> asyncio.Task:
        generation = entry.generation
        task = asyncio.create_task(self._fetch(entry, loader, retry, generation))
        entry.task = task
        entry.task_generation = generation
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        task.add_done_callback(_consume_exception)
        return task

    async def _fetch(
        self,
        entry: _Entry,
        loader: Loader,
        retry: RetryPolicy | None,
        generation: int,
    ) -> Any:
        started = time.perf_counter()
        logger.debug("cache_fetch_started", key=entry.key)
        try:
            value = await run_with_retry(loader, retry, name=str(entry.key))
        except Exception as e:
            self._metrics.record_fetch((time.perf_counter() - started) * 1000, failed=True)
            if self._is_current(entry, generation):
                entry.error = e
                self._notify(CacheEvent(key=entry.key, kind=CacheEventKind.ERROR, error=e))
            raise
        finally:
            if entry.task is asyncio.current_task():
                entry.task = None

        self._metrics.record_fetch((time.perf_counter() - started) * 1000)
        if self._is_current(entry, generation):
            entry.value = value
            entry.fetched_at = self._clock()
            entry.invalidated = False
            entry.error = None
            self._notify(CacheEvent(key=entry.key, kind=CacheEventKind.UPDATED, value=value))
        else:
            logger.debug("cache_fetch_discarded", key=entry.key)
        return value

    def _is_current(self, entry: _Entry, generation: int) -> bool:
        return self._entries.get(entry.key) is entry and entry.generation == generation

    # ---------------------------------------------------------------- writes

    def invalidate(self, key_or_prefix: CacheKey) -> int:
        """Mark every entry whose key starts with ``key_or_prefix`` as stale.

        Values are kept (still visible through ``peek``) but the next read
        refetches. Invalidating an absent or already invalid key is a no-op.

        Returns:
            Number of entries that became invalid
        """
        count = 0
        for entry in self._matching(key_or_prefix):
            if entry.task is not None:
                entry.generation += 1
            if entry.invalidated:
                continue
            entry.invalidated = True
            count += 1
            self._notify(CacheEvent(key=entry.key, kind=CacheEventKind.INVALIDATED, value=entry.value))
        if count:
            logger.debug("cache_invalidated", prefix=key_or_prefix, count=count)
        return count

    def write(self, key: CacheKey, value: Any, ttl: float | None = None) -> None:
        """Seed or overwrite the value for ``key``, fresh as of now."""
        now = self._clock()
        entry = self._entries.get(key)
        if entry is None:
            entry = _Entry(key, self._stale_time if ttl is None else ttl, now)
            self._entries[key] = entry
        elif ttl is not None:
            entry.ttl = ttl
        entry.generation += 1
        entry.value = value
        entry.fetched_at = now
        entry.last_read_at = now
        entry.invalidated = False
        entry.error = None
        self._notify(CacheEvent(key=key, kind=CacheEventKind.UPDATED, value=value))

    def evict(self, key_or_prefix: CacheKey) -> int:
        """Remove every entry whose key starts with ``key_or_prefix``.

        A fetch in flight for an evicted key still resolves for its callers
        but does not repopulate the cache.

        Returns:
            Number of entries removed
        """
        removed = [entry.key for entry in self._matching(key_or_prefix)]
        for key in removed:
            self._remove(key)
        if removed:
            logger.debug("cache_evicted", prefix=key_or_prefix, count=len(removed))
        return len(removed)

    def restore(self, key: CacheKey, snapshot: CacheEntryEntity | None) -> None:
        """Put back an entry captured with ``get_entry`` (evict if None).

        Used to undo an optimistic write after the request behind it failed.
        """
        if snapshot is None:
            self._remove(key)
            return
        now = self._clock()
        entry = self._entries.get(key)
        if entry is None:
            entry = _Entry(key, snapshot.ttl, now)
            self._entries[key] = entry
        entry.generation += 1
        entry.value = snapshot.value
        entry.fetched_at = snapshot.fetched_at
        entry.ttl = snapshot.ttl
        entry.invalidated = snapshot.is_invalidated
        entry.error = snapshot.error
        self._notify(CacheEvent(key=key, kind=CacheEventKind.UPDATED, value=snapshot.value))

    def clear(self) -> None:
        """Drop every entry (subscriptions are kept)."""
        for key in list(self._entries):
            self._remove(key)

    def _remove(self, key: CacheKey) -> None:
        if self._entries.pop(key, None) is not None:
            self._notify(CacheEvent(key=key, kind=CacheEventKind.EVICTED))

    def _matching(self, prefix: CacheKey) -> Iterator[_Entry]:
        for key, entry in list(self._entries.items()):
            if matches_prefix(key, prefix):
                yield entry

    # --------------------------------------------------------- subscriptions

    def subscribe(self, key: CacheKey, listener: CacheListener) -> Subscription:
        """Register ``listener`` for change events on ``key``.

        An entry with at least one subscriber is never garbage collected.
        """
        self._listeners.setdefault(key, []).append(listener)
        return Subscription(self, key, listener)

    def _remove_listener(self, key: CacheKey, listener: CacheListener) -> None:
        listeners = self._listeners.get(key)
        if not listeners:
            return
        with contextlib.suppress(ValueError):
            listeners.remove(listener)
        if not listeners:
            del self._listeners[key]

    def _notify(self, event: CacheEvent) -> None:
        for listener in list(self._listeners.get(event.key, ())):
            try:
                listener(event)
            except Exception:
                logger.exception("cache_listener_failed", key=event.key, kind=event.kind.value)

    # ------------------------------------------------------------- lifecycle

    def collect_garbage(self) -> int:
        """Purge entries idle for longer than gc_time.

        Entries with a fetch in flight or with subscribers are kept.

        Returns:
            Number of entries purged
        """
        now = self._clock()
        idle = [
            key
            for key, entry in self._entries.items()
            if entry.task is None
            and not self._listeners.get(key)
            and now - entry.last_read_at > self._gc_time
        ]
        for key in idle:
            del self._entries[key]
        if idle:
            logger.debug("cache_gc", purged=len(idle), remaining=len(self._entries))
        return len(idle)

    async def _gc_loop(self) -> None:
        while True:
            await asyncio.sleep(self._gc_interval)
            self.collect_garbage()

    def start(self) -> None:
        """Start periodic garbage collection (idempotent)."""
        if self._gc_task is None or self._gc_task.done():
            self._gc_task = asyncio.create_task(self._gc_loop())

    async def close(self) -> None:
        """End of session: stop GC, cancel in-flight fetches, drop all state."""
        tasks = list(self._tasks)
        if self._gc_task is not None:
            tasks.append(self._gc_task)
            self._gc_task = None
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError, Exception):
                await task
        self._entries.clear()
        self._listeners.clear()

    async def __aenter__(self) -> "QueryCache":
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ----------------------------------------------------------------- stats

    def stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        return {
            "entries": len(self._entries),
            "in_flight": sum(1 for entry in self._entries.values() if entry.task is not None),
            "subscribed_keys": len(self._listeners),
            "stale_time": self._stale_time,
            "gc_time": self._gc_time,
            **self._metrics.to_dict(),
        }

    @property
    def stale_time(self) -> float:
        return self._stale_time

    @property
    def metrics(self) -> CacheMetrics:
        return self._metrics
