"""Shared plumbing for resource services.

A resource service binds cache keys to API calls. Reads go through the
cache under the query retry policy; writes go straight to the client under
the mutation retry policy and, only once the server confirmed them, apply a
MutationRecord to the cache.
"""

from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from itam_sync.cache import QueryCache
from itam_sync.entities import MutationRecord
from itam_sync.keys import CacheKey
from itam_sync.log import get_logger
from itam_sync.protocols import RequestClient
from itam_sync.retry import MUTATION_RETRY, QUERY_RETRY, RetryPolicy, run_with_retry

logger = get_logger(__name__)

T = TypeVar("T")


def is_valid_id(value: Any) -> bool:
    """Positive integer ids only; detail reads with anything else are skipped."""
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def apply_mutation(cache: QueryCache, record: MutationRecord) -> None:
    """Apply the cache effects of a successful write.

    Invalidations run first and writes last, so a value seeded from the
    server's response is not immediately marked stale by a broader prefix.
    """
    for prefix in record.invalidate:
        cache.invalidate(prefix)
    for key in record.evict:
        cache.evict(key)
    for key, value in record.write:
        cache.write(key, value)
    logger.info(
        "mutation_applied",
        kind=record.kind.value,
        resource=record.resource,
        entity_id=record.entity_id,
        invalidated=len(record.invalidate),
        written=len(record.write),
        evicted=len(record.evict),
    )


class ResourceService:
    """Base class for per-entity services."""

    def __init__(
        self,
        client: RequestClient,
        cache: QueryCache,
        query_retry: RetryPolicy | None = None,
        mutation_retry: RetryPolicy | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            client: Client used for every request (required).
            cache: Session cache shared with the other services (required).
            query_retry: Retry policy for reads. Defaults to QUERY_RETRY.
            mutation_retry: Retry policy for writes. Defaults to MUTATION_RETRY.
        """
        self._client = client
        self._cache = cache
        self._query_retry = query_retry or QUERY_RETRY
        self._mutation_retry = mutation_retry or MUTATION_RETRY

    async def _query(
        self,
        key: CacheKey,
        loader: Callable[[], Awaitable[T]],
        ttl: float | None = None,
    ) -> T:
        return await self._cache.read(key, loader, ttl=ttl, retry=self._query_retry)

    async def _mutate(
        self,
        name: str,
        operation: Callable[[], Awaitable[T]],
        on_success: Callable[[T], MutationRecord],
    ) -> T:
        """Run a write and apply its cache effects.

        On failure the error propagates and the cache is left untouched.
        """
        result = await run_with_retry(operation, self._mutation_retry, name=name)
        apply_mutation(self._cache, on_success(result))
        return result

    @property
    def client(self) -> RequestClient:
        return self._client

    @property
    def cache(self) -> QueryCache:
        return self._cache
